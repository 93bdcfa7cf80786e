from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from smpexchange.adapters.exchange import PydanticElementTranslator
from smpexchange.domain.exchange import (
    ActionLog,
    ImportEngine,
    PlanOutcome,
    PreconditionError,
    Severity,
    import_service_groups,
)
from tests.helpers.documents import (
    PARTICIPANT_A,
    PARTICIPANT_B,
    PARTICIPANT_C,
    business_card_element,
    endpoint_element,
    make_batch,
    redirect_element,
    service_group_element,
)
from tests.helpers.registry import MUTATING_CALLS, FakeRegistry

if TYPE_CHECKING:
    from smpexchange.domain.exchange import ParsedBatch, StagedBatch


@pytest.fixture
def registry() -> FakeRegistry:
    registry = FakeRegistry()
    registry.add_user("admin", "Administrator")
    return registry


def _import(
    batch: ParsedBatch,
    registry: FakeRegistry,
    *,
    overwrite: bool = False,
    **kwargs: Any,
) -> ActionLog:
    return import_service_groups(
        batch,
        overwrite_existing=overwrite,
        default_owner=registry.users["admin"],
        existing_group_keys=registry.service_group_keys(),
        existing_business_card_keys=registry.business_card_keys(),
        registry=registry,
        translator=PydanticElementTranslator(),
        **kwargs,
    )


def _snapshot(registry: FakeRegistry) -> dict[str, object]:
    return {
        "groups": {
            key: (group.owner_id, group.extension) for key, group in registry.groups.items()
        },
        "endpoints": {key: value.endpoint_url for key, value in registry.endpoints.items()},
        "redirects": {key: value.target_href for key, value in registry.redirects.items()},
        "business_cards": {
            key: [entity.name for entity in card.entities]
            for key, card in registry.business_cards.items()
        },
    }


def test_empty_batch_logs_one_warning(registry: FakeRegistry) -> None:
    action_log = _import(make_batch(), registry)

    assert len(action_log) == 1
    assert action_log[0].severity is Severity.WARNING
    assert registry.mutations == []


def test_new_group_with_children(registry: FakeRegistry) -> None:
    batch = make_batch(
        [
            service_group_element(
                PARTICIPANT_A,
                endpoints=[endpoint_element(), endpoint_element(process="ordering")],
                redirects=[redirect_element()],
            )
        ]
    )

    action_log = _import(batch, registry)

    assert registry.calls_to("create_group") == [("create_group", PARTICIPANT_A, True)]
    assert len(registry.calls_to("merge_endpoint")) == 2
    assert len(registry.calls_to("upsert_redirect")) == 1
    assert len(action_log.by_severity(Severity.SUCCESS)) == 4
    assert not action_log.has_error()


def test_existing_group_without_overwrite_changes_nothing(registry: FakeRegistry) -> None:
    registry.seed_group(PARTICIPANT_A)

    action_log = _import(make_batch([service_group_element(PARTICIPANT_A)]), registry)

    assert registry.mutations == []
    assert any(
        record.severity is Severity.WARNING
        and record.message == "Ignoring already existing service group"
        for record in action_log
    )
    assert not action_log.has_error()


def test_existing_group_with_overwrite_is_recreated(registry: FakeRegistry) -> None:
    registry.seed_group(PARTICIPANT_A)

    action_log = _import(
        make_batch([service_group_element(PARTICIPANT_A)]),
        registry,
        overwrite=True,
    )

    assert registry.calls_to("delete_group") == [("delete_group", PARTICIPANT_A, False)]
    assert registry.calls_to("create_group") == [("create_group", PARTICIPANT_A, False)]
    assert [record.message for record in action_log.by_severity(Severity.SUCCESS)] == [
        "Successfully deleted service group",
        "Successfully created service group",
    ]


def test_any_parse_error_prevents_all_writes(registry: FakeRegistry) -> None:
    batch = make_batch(
        [
            service_group_element(PARTICIPANT_A),
            {"participant_id": PARTICIPANT_B},
            service_group_element(PARTICIPANT_C),
        ]
    )

    action_log = _import(batch, registry)

    assert registry.mutations == []
    messages = [record.message for record in action_log.by_severity(Severity.ERROR)]
    assert messages == [
        "Error parsing the service group at index 1. Ignoring this service group.",
        "Nothing will be imported because of the previous errors.",
    ]


def test_business_card_for_unknown_group_prevents_all_writes(registry: FakeRegistry) -> None:
    batch = make_batch(
        [service_group_element(PARTICIPANT_A)],
        [business_card_element(PARTICIPANT_B)],
    )

    action_log = _import(batch, registry)

    assert action_log.has_error()
    assert registry.mutations == []


def test_duplicate_group_key_prevents_all_writes(registry: FakeRegistry) -> None:
    batch = make_batch(
        [
            service_group_element(
                PARTICIPANT_A,
                endpoints=[endpoint_element(endpoint_url="https://first.example.org")],
            ),
            service_group_element(
                PARTICIPANT_A,
                endpoints=[endpoint_element(endpoint_url="https://second.example.org")],
            ),
        ]
    )

    action_log = _import(batch, registry)

    assert registry.mutations == []
    assert [record.message for record in action_log.by_severity(Severity.ERROR)] == [
        "The service group at index 1 is already contained in the batch. "
        "Will overwrite the previous definition.",
        "Nothing will be imported because of the previous errors.",
    ]


def test_duplicate_business_card_key_prevents_all_writes(registry: FakeRegistry) -> None:
    batch = make_batch(
        [service_group_element(PARTICIPANT_A)],
        [business_card_element(PARTICIPANT_A), business_card_element(PARTICIPANT_A)],
    )

    action_log = _import(batch, registry)

    assert registry.mutations == []
    errors = action_log.by_severity(Severity.ERROR)
    assert [record.key for record in errors] == [PARTICIPANT_A, None]
    assert "already contained in the batch" in errors[0].message


def test_failed_group_gets_no_business_card(registry: FakeRegistry) -> None:
    registry.fail("create_group", PARTICIPANT_A)
    batch = make_batch(
        [service_group_element(PARTICIPANT_A), service_group_element(PARTICIPANT_B)],
        [business_card_element(PARTICIPANT_A), business_card_element(PARTICIPANT_B)],
    )

    action_log = _import(batch, registry)

    assert ("upsert_business_card", PARTICIPANT_A) not in registry.calls
    assert ("upsert_business_card", PARTICIPANT_B) in registry.calls
    assert action_log.has_error()


def test_overwritten_card_removed_with_group_is_success(registry: FakeRegistry) -> None:
    registry.seed_group(PARTICIPANT_A, business_card=[])
    batch = make_batch(
        [service_group_element(PARTICIPANT_A)],
        [business_card_element(PARTICIPANT_A)],
    )

    action_log = _import(batch, registry, overwrite=True)

    assert not action_log.has_error()
    assert PARTICIPANT_A in registry.business_cards


@pytest.mark.parametrize("operation", sorted(MUTATING_CALLS))
def test_storage_failures_never_escape(registry: FakeRegistry, operation: str) -> None:
    registry.seed_group(PARTICIPANT_A, business_card=[])
    registry.fail(operation, PARTICIPANT_A, PARTICIPANT_B)
    batch = make_batch(
        [
            service_group_element(
                PARTICIPANT_A,
                endpoints=[endpoint_element()],
                redirects=[redirect_element()],
            ),
            service_group_element(PARTICIPANT_B, endpoints=[endpoint_element()]),
        ],
        [business_card_element(PARTICIPANT_A), business_card_element(PARTICIPANT_B)],
    )

    action_log = _import(batch, registry, overwrite=True)

    assert action_log.has_error()
    assert all(record.has_cause for record in action_log.by_severity(Severity.ERROR))


def test_import_with_overwrite_is_idempotent(registry: FakeRegistry) -> None:
    batch = make_batch(
        [
            service_group_element(
                PARTICIPANT_A,
                endpoints=[endpoint_element(), endpoint_element(process="ordering")],
                redirects=[redirect_element()],
            ),
            service_group_element(PARTICIPANT_B, extension="<Extension/>"),
        ],
        [business_card_element(PARTICIPANT_A)],
    )

    first = _import(batch, registry, overwrite=True)
    state_after_first = _snapshot(registry)
    second = _import(batch, registry, overwrite=True)

    assert not first.has_error()
    assert not second.has_error()
    assert _snapshot(registry) == state_after_first


def test_directory_integration_disabled_skips_cards(registry: FakeRegistry) -> None:
    registry.directory_integration = False
    batch = make_batch(
        [service_group_element(PARTICIPANT_A)],
        [business_card_element(PARTICIPANT_A)],
    )

    action_log = _import(batch, registry)

    assert not registry.business_cards
    assert all(call[0] != "upsert_business_card" for call in registry.calls)
    assert not action_log.has_error()


def test_correlation_id_is_passed_through(registry: FakeRegistry) -> None:
    action_log = _import(make_batch(), registry, correlation_id="nightly")

    assert action_log.correlation_id == "nightly"


def test_missing_arguments_raise_precondition_error(registry: FakeRegistry) -> None:
    with pytest.raises(PreconditionError, match="registry"):
        import_service_groups(
            make_batch(),
            overwrite_existing=False,
            default_owner=registry.users["admin"],
            existing_group_keys=set(),
            existing_business_card_keys=set(),
            registry=None,  # pyright: ignore[reportArgumentType]
            translator=PydanticElementTranslator(),
        )


def test_engine_stages_can_be_replaced(registry: FakeRegistry) -> None:
    committed: list[StagedBatch] = []

    def veto(staged: StagedBatch, *, action_log: ActionLog) -> PlanOutcome:
        action_log.record(Severity.INFO, None, "Dry run")
        return PlanOutcome.ABORTED

    def record_commit(staged: StagedBatch, **_: object) -> None:
        committed.append(staged)

    engine = ImportEngine(plan=veto, commit=record_commit)  # pyright: ignore[reportArgumentType]

    action_log = _import(
        make_batch([service_group_element(PARTICIPANT_A)]),
        registry,
        engine=engine,
    )

    assert committed == []
    assert action_log[-1].message == "Dry run"
    assert registry.mutations == []
