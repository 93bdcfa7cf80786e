from __future__ import annotations

from smpexchange.domain.exchange import (
    ActionLog,
    Severity,
    StagedBatch,
    StagedGroup,
    StagingDecision,
    commit_import,
)
from smpexchange.domain.exchange.commit import retract_business_cards
from smpexchange.domain.model import (
    BusinessCard,
    BusinessEntity,
    Endpoint,
    Redirect,
    ServiceGroup,
)
from tests.helpers.registry import FakeRegistry

ALPHA = "9915:alpha"
BRAVO = "9915:bravo"


def _endpoint(participant_id: str, process: str = "billing") -> Endpoint:
    return Endpoint(
        participant_id=participant_id,
        document_type="invoice",
        process=process,
        transport_profile="as4",
        endpoint_url="https://ap.example.org",
    )


def _redirect(participant_id: str) -> Redirect:
    return Redirect(
        participant_id=participant_id,
        document_type="order",
        target_href="https://smp.example.net",
    )


def _card(participant_id: str, name: str = "Example Ltd") -> BusinessCard:
    return BusinessCard(
        participant_id=participant_id,
        entities=[BusinessEntity(name=name, country_code="AT")],
    )


def _stage(
    staged: StagedBatch,
    participant_id: str,
    *,
    overwrite: bool = False,
    endpoints: int = 0,
    redirects: int = 0,
) -> None:
    group = ServiceGroup(participant_id=participant_id, owner_id="admin")
    entry = StagedGroup(
        group=group,
        decision=StagingDecision.OVERWRITE if overwrite else StagingDecision.IMPORT,
        endpoints=[_endpoint(participant_id, f"process-{index}") for index in range(endpoints)],
        redirects=[_redirect(participant_id) for _ in range(redirects)],
    )
    staged.stage_group(entry)
    if overwrite:
        staged.group_deletions[participant_id] = group


def test_phases_run_in_dependency_order() -> None:
    registry = FakeRegistry()
    registry.seed_group(ALPHA, business_card=[])
    staged = StagedBatch()
    _stage(staged, ALPHA, overwrite=True, endpoints=1)
    _stage(staged, BRAVO, redirects=1)
    staged.stage_business_card(_card(ALPHA))
    staged.business_card_deletions[ALPHA] = _card(ALPHA)

    report = commit_import(staged, registry=registry, action_log=ActionLog())

    assert [call[0] for call in registry.mutations] == [
        "delete_group",
        "create_group",
        "create_group",
        "merge_endpoint",
        "upsert_redirect",
        "delete_business_card",
        "upsert_business_card",
    ]
    assert registry.calls_to("delete_group") == [("delete_group", ALPHA, False)]
    assert registry.calls_to("create_group") == [
        ("create_group", ALPHA, False),
        ("create_group", BRAVO, True),
    ]
    assert report.deleted_groups == {ALPHA}
    assert set(report.created_groups) == {ALPHA, BRAVO}
    assert report.merged_endpoints == 1
    assert report.upserted_redirects == 1
    assert report.created_business_cards == 1


def test_failed_group_creation_skips_children_and_retracts_card() -> None:
    registry = FakeRegistry()
    registry.fail("create_group", ALPHA)
    staged = StagedBatch()
    _stage(staged, ALPHA, endpoints=2, redirects=1)
    _stage(staged, BRAVO, endpoints=1)
    staged.stage_business_card(_card(ALPHA))
    staged.stage_business_card(_card(BRAVO))
    action_log = ActionLog()

    report = commit_import(staged, registry=registry, action_log=action_log)

    assert report.failed_groups == {ALPHA}
    assert report.retracted_business_cards == (ALPHA,)
    assert ALPHA not in registry.business_cards
    assert BRAVO in registry.business_cards
    assert all(call[1][0] == BRAVO for call in registry.calls_to("merge_endpoint"))
    assert registry.calls_to("upsert_business_card") == [("upsert_business_card", BRAVO)]

    alpha_records = [(record.severity, record.message) for record in action_log.for_key(ALPHA)]
    assert alpha_records == [
        (Severity.ERROR, "Error creating the new service group"),
        (
            Severity.INFO,
            "Business card is not created because its service group could not be created",
        ),
    ]
    assert action_log.for_key(ALPHA)[0].has_cause


def test_endpoint_failure_does_not_affect_siblings() -> None:
    registry = FakeRegistry()
    registry.fail("merge_endpoint", ALPHA)
    staged = StagedBatch()
    _stage(staged, ALPHA, endpoints=2, redirects=1)
    _stage(staged, BRAVO, endpoints=1)
    action_log = ActionLog()

    report = commit_import(staged, registry=registry, action_log=action_log)

    endpoint_errors = [
        record
        for record in action_log.by_severity(Severity.ERROR)
        if record.message == "Error creating the new endpoint"
    ]
    assert len(endpoint_errors) == 2
    assert report.merged_endpoints == 1
    assert report.upserted_redirects == 1
    assert len(registry.redirects) == 1


def test_unchanged_results_are_errors() -> None:
    registry = FakeRegistry()
    registry.seed_group(ALPHA)
    registry.report_unchanged("delete_group", ALPHA)
    registry.report_unchanged("upsert_redirect", BRAVO)
    staged = StagedBatch()
    _stage(staged, ALPHA, overwrite=True)
    _stage(staged, BRAVO, redirects=1)
    action_log = ActionLog()

    report = commit_import(staged, registry=registry, action_log=action_log)

    messages = [(record.key, record.message) for record in action_log.by_severity(Severity.ERROR)]
    assert (ALPHA, "Failed to delete service group") in messages
    # The group is still there, so re-creating it fails as well.
    assert (ALPHA, "Error creating the new service group") in messages
    assert (BRAVO, "Error creating the new redirect") in messages
    assert report.deleted_groups == set()
    assert set(report.created_groups) == {BRAVO}


def test_card_removed_with_its_group_is_not_an_error() -> None:
    registry = FakeRegistry()
    registry.seed_group(ALPHA, business_card=[BusinessEntity(name="Old", country_code="AT")])
    staged = StagedBatch()
    _stage(staged, ALPHA, overwrite=True)
    staged.stage_business_card(_card(ALPHA, "New"))
    staged.business_card_deletions[ALPHA] = _card(ALPHA, "New")
    action_log = ActionLog()

    report = commit_import(staged, registry=registry, action_log=action_log)

    assert not action_log.has_error()
    assert any(
        record.severity is Severity.SUCCESS
        and record.message == "Business card was already deleted together with its service group"
        for record in action_log
    )
    assert report.deleted_business_cards == 0
    assert registry.business_cards[ALPHA].entities[0].name == "New"


def test_missing_card_of_surviving_group_is_an_error() -> None:
    registry = FakeRegistry()
    registry.seed_group(ALPHA)
    staged = StagedBatch()
    staged.stage_business_card(_card(ALPHA))
    staged.business_card_deletions[ALPHA] = _card(ALPHA)
    action_log = ActionLog()

    commit_import(staged, registry=registry, action_log=action_log)

    errors = action_log.by_severity(Severity.ERROR)
    assert [(record.key, record.message) for record in errors] == [
        (ALPHA, "Failed to delete business card")
    ]
    assert ALPHA in registry.business_cards


def test_business_card_storage_failure_is_logged() -> None:
    registry = FakeRegistry()
    registry.seed_group(ALPHA)
    registry.fail("upsert_business_card", ALPHA)
    staged = StagedBatch()
    staged.stage_business_card(_card(ALPHA))
    action_log = ActionLog()

    report = commit_import(staged, registry=registry, action_log=action_log)

    assert report.created_business_cards == 0
    assert action_log[-1].severity is Severity.ERROR
    assert action_log[-1].message == "Failed to create business card"


def test_retract_business_cards_filters_failed_keys() -> None:
    cards = {ALPHA: _card(ALPHA), BRAVO: _card(BRAVO)}

    remaining = retract_business_cards(cards, {ALPHA})

    assert list(remaining) == [BRAVO]
    assert list(cards) == [ALPHA, BRAVO]
