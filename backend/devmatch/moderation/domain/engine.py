"""Moderation engine: legality rules and the report state machine.

Only ``PENDING`` reports are actionable. ``RESOLVED`` is terminal and
``REVIEWED`` is reserved (nothing transitions into it). ``REMOVE`` and ``BAN``
are recorded as intents; enacting them on the reported entity is the report
service's job.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from devmatch.moderation.domain.errors import InvalidActionError, InvalidStateError
from devmatch.moderation.domain.models import AuthorRef, Report, ReportAction, ReportStatus

ACTIONABLE_STATUSES = frozenset({ReportStatus.PENDING})

_ALLOWED_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.REVIEWED, ReportStatus.RESOLVED}),
    ReportStatus.REVIEWED: frozenset({ReportStatus.RESOLVED}),
    ReportStatus.RESOLVED: frozenset(),
}


@dataclass(frozen=True, slots=True)
class Transition:
    """Outcome of a legal resolution and the follow-up it requires."""

    before: Report
    after: Report
    close_detail: bool = True
    reload_list: bool = False


def parse_action(action: Any) -> ReportAction:
    if isinstance(action, ReportAction):
        return action
    try:
        return ReportAction(action)
    except ValueError as exc:
        raise InvalidActionError(f"unsupported action: {action!r}") from exc


def can_transition(current: ReportStatus, target: ReportStatus) -> bool:
    return target in _ALLOWED_TRANSITIONS[current]


def can_resolve(report: Report) -> bool:
    return report.status in ACTIONABLE_STATUSES


def available_actions(report: Report) -> tuple[ReportAction, ...]:
    if not can_resolve(report):
        return ()
    return tuple(ReportAction)


def check_resolvable(report: Report, action: Any) -> ReportAction:
    """Validate a resolution request without touching the report.

    State is checked before the action value so a resolved report rejects any
    input with :class:`InvalidStateError`.
    """

    if not can_resolve(report):
        raise InvalidStateError(
            f"report {report.id} is {report.status.value}",
            report_id=report.id,
        )
    return parse_action(action)


def resolve(
    report: Report,
    action: Any,
    *,
    actor: AuthorRef,
    now: Optional[datetime] = None,
) -> Report:
    parsed = check_resolvable(report, action)
    stamp = now or datetime.now(timezone.utc)
    return dataclasses.replace(
        report,
        status=ReportStatus.RESOLVED,
        action=parsed,
        resolved_by=actor,
        resolved_at=stamp,
        updated_at=stamp,
    )


def plan_resolution(before: Report, expected: Report, confirmed: Optional[Report] = None) -> Transition:
    """Describe how a confirmed resolution is applied to local state.

    ``expected`` is the locally computed outcome and ``confirmed`` what the
    report service returned. The service copy wins when it is a legal,
    consistent successor of ``before``. The result replaces the list entry in
    place, so no reload is needed, and the detail panel is closed.
    """

    after = expected
    if (
        confirmed is not None
        and confirmed.id == before.id
        and confirmed.is_resolved
        and can_transition(before.status, confirmed.status)
        and confirmed.is_consistent()
    ):
        after = confirmed
    return Transition(before=before, after=after)
