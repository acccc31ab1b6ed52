"""
Cost sheet approval state machine.

States:  DRAFT -> PENDING_APPROVAL -> APPROVED | REJECTED
Edits:   DRAFT | REJECTED -> DRAFT (approved sheets are immutable)

``transition`` validates an event against the table and the actor's
capabilities, stamps workflow metadata on the sheet in memory and
returns the notification to emit, if any. Locking and saving belong
to the service layer.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.utils import timezone

from apps.accounts.permissions import Actor, Capability
from apps.core.exceptions import (
    CostSheetValidationError,
    InsufficientPrivilegeError,
    InvalidTransitionError,
)
from apps.costsheets.models import CostSheetStatus

logger = logging.getLogger(__name__)


class Event:
    SUBMIT = 'submit'
    APPROVE = 'approve'
    REJECT = 'reject'
    EDIT = 'edit'


class Notification:
    SUBMITTED = 'SUBMITTED'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'


@dataclass(frozen=True)
class Rule:
    sources: frozenset
    target: str
    notification: Optional[str] = None


TRANSITIONS = {
    Event.SUBMIT: Rule(
        sources=frozenset({CostSheetStatus.DRAFT}),
        target=CostSheetStatus.PENDING_APPROVAL,
        notification=Notification.SUBMITTED,
    ),
    Event.APPROVE: Rule(
        sources=frozenset({CostSheetStatus.PENDING_APPROVAL}),
        target=CostSheetStatus.APPROVED,
        notification=Notification.APPROVED,
    ),
    Event.REJECT: Rule(
        sources=frozenset({CostSheetStatus.PENDING_APPROVAL}),
        target=CostSheetStatus.REJECTED,
        notification=Notification.REJECTED,
    ),
    Event.EDIT: Rule(
        sources=frozenset({CostSheetStatus.DRAFT, CostSheetStatus.REJECTED}),
        target=CostSheetStatus.DRAFT,
    ),
}


def is_owner(sheet, actor: Actor) -> bool:
    return actor.user_id is not None and sheet.created_by_id == actor.user_id


def can_edit(sheet, actor: Actor) -> bool:
    return is_owner(sheet, actor) or actor.can(Capability.EDIT_ANY)


def can_submit(sheet, actor: Actor) -> bool:
    return (
        (is_owner(sheet, actor) and actor.can(Capability.SUBMIT))
        or actor.can(Capability.EDIT_ANY)
    )


def can_decide(sheet, actor: Actor) -> bool:
    return actor.can(Capability.APPROVE)


GUARDS = {
    Event.SUBMIT: can_submit,
    Event.APPROVE: can_decide,
    Event.REJECT: can_decide,
    Event.EDIT: can_edit,
}


def allowed_events(sheet, actor: Actor) -> list:
    """Events the actor could trigger on the sheet right now."""
    return [
        event for event, rule in TRANSITIONS.items()
        if sheet.status in rule.sources and GUARDS[event](sheet, actor)
    ]


def check_transition(sheet, event: str, actor: Actor, remarks: Optional[str] = None) -> Rule:
    """
    Check an event without changing the sheet.

    Order: remarks, then source state, then privilege.

    Raises:
        CostSheetValidationError: Rejection without remarks.
        InvalidTransitionError: Unknown event or wrong source state.
        InsufficientPrivilegeError: Actor lacks the capability.
    """
    if event == Event.REJECT and not (remarks or '').strip():
        raise CostSheetValidationError(
            detail={'remarks': ['Remarks are required when rejecting a cost sheet.']}
        )

    rule = TRANSITIONS.get(event)
    if rule is None:
        raise InvalidTransitionError(detail=f"Unknown event '{event}'.")

    if sheet.status not in rule.sources:
        logger.warning(
            "Cost sheet %s: %s refused in status %s",
            sheet.pk,
            event,
            sheet.status,
        )
        raise InvalidTransitionError(
            detail=f"Cannot {event} a cost sheet in status {sheet.status}."
        )

    if not GUARDS[event](sheet, actor):
        logger.warning(
            "Cost sheet %s: user %s (%s) lacks privilege to %s",
            sheet.pk,
            actor.user_id,
            actor.role,
            event,
        )
        raise InsufficientPrivilegeError(
            detail=f"You are not allowed to {event} this cost sheet."
        )

    return rule


def transition(
    sheet,
    event: str,
    actor: Actor,
    remarks: Optional[str] = None,
    now=None,
) -> Optional[str]:
    """
    Apply an event to a cost sheet in memory.

    For EDIT the caller recomputes derived fields; this function
    only resets status and clears approval metadata.

    Args:
        sheet: A CostSheet (or any object with the workflow fields).
        event: One of Event.
        actor: The acting user.
        remarks: Approval or rejection remarks.
        now: Timestamp to stamp; defaults to the current time.

    Returns:
        The Notification to emit, or None.
    """
    rule = check_transition(sheet, event, actor, remarks)
    now = now or timezone.now()
    previous = sheet.status

    if event == Event.SUBMIT:
        sheet.submitted_at = now
    elif event in (Event.APPROVE, Event.REJECT):
        sheet.approved_at = now
        sheet.approved_by_id = actor.user_id
        sheet.approval_remarks = (remarks or '').strip()
    elif event == Event.EDIT:
        sheet.submitted_at = None
        sheet.approved_at = None
        sheet.approved_by_id = None
        sheet.approval_remarks = ''

    sheet.status = rule.target

    logger.info(
        "Cost sheet %s: %s by user %s, %s -> %s",
        sheet.pk,
        event,
        actor.user_id,
        previous,
        sheet.status,
    )
    return rule.notification
