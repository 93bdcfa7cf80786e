from __future__ import annotations

from smpexchange.domain.exchange import (
    ActionLog,
    PlanOutcome,
    Severity,
    StagedBatch,
    StagedGroup,
    StagingDecision,
    plan_import,
)
from smpexchange.domain.model import BusinessCard, ServiceGroup


def _staged_with_group() -> StagedBatch:
    staged = StagedBatch()
    staged.stage_group(
        StagedGroup(
            group=ServiceGroup(participant_id="9915:alpha", owner_id="admin"),
            decision=StagingDecision.IMPORT,
        )
    )
    return staged


def test_empty_batch_is_a_single_warning() -> None:
    action_log = ActionLog()

    outcome = plan_import(StagedBatch(), action_log=action_log)

    assert outcome is PlanOutcome.NOTHING_TO_IMPORT
    assert len(action_log) == 1
    assert action_log[0].severity is Severity.WARNING
    assert action_log[0].message == "Found neither a service group nor a business card to import."


def test_empty_batch_message_without_directory_integration() -> None:
    action_log = ActionLog()

    plan_import(StagedBatch(directory_integration=False), action_log=action_log)

    assert action_log[0].message == "Found no service group to import."


def test_previous_error_aborts_everything() -> None:
    action_log = ActionLog()
    action_log.record(Severity.ERROR, None, "Error parsing the service group at index 0.")

    outcome = plan_import(_staged_with_group(), action_log=action_log)

    assert outcome is PlanOutcome.ABORTED
    assert action_log[-1].severity is Severity.ERROR
    assert action_log[-1].message == "Nothing will be imported because of the previous errors."


def test_warnings_do_not_abort() -> None:
    action_log = ActionLog()
    action_log.record(Severity.WARNING, "9915:alpha", "Ignoring already existing service group")

    outcome = plan_import(_staged_with_group(), action_log=action_log)

    assert outcome is PlanOutcome.PROCEED
    assert action_log[-1].message == "Import is performed!"


def test_business_cards_alone_are_enough_to_proceed() -> None:
    staged = StagedBatch()
    staged.stage_business_card(BusinessCard(participant_id="9915:alpha"))

    assert plan_import(staged, action_log=ActionLog()) is PlanOutcome.PROCEED
