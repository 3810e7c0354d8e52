"""Human-readable decision requests and result notifications.

Times are rendered in the user's own offset.
"""

from datetime import datetime, tzinfo

from slotwise.conflicts.outcomes import OutcomeStatus, ResolutionOutcome
from slotwise.domain import ConflictRequest, ResolutionKind, Task, TimeWindow, User
from slotwise.domain.timeutils import format_offset, parse_utc_offset
from slotwise.providers.messaging import DecisionOption, DecisionRequest

DECISION_OPTIONS: tuple[tuple[ResolutionKind, str], ...] = (
    (ResolutionKind.BUMP, "Move conflicting tasks"),
    (ResolutionKind.SCHEDULE_LATER, "Schedule later"),
    (ResolutionKind.FIND_ALTERNATIVE, "Find another time"),
    (ResolutionKind.FORCE, "Schedule anyway"),
    (ResolutionKind.SKIP, "Skip for now"),
)


def format_instant(instant: datetime, tz: tzinfo) -> str:
    local = instant.astimezone(tz)
    return local.strftime("%a %d %b %H:%M")


def format_window(window: TimeWindow, tz: tzinfo) -> str:
    start = window.start.astimezone(tz)
    end = window.end.astimezone(tz)
    if start.date() == end.date():
        return f"{format_instant(start, tz)}-{end.strftime('%H:%M')} (UTC{format_offset(tz)})"
    return f"{format_instant(start, tz)} - {format_instant(end, tz)} (UTC{format_offset(tz)})"


def build_decision_request(task: Task, user: User, request: ConflictRequest) -> DecisionRequest:
    """Summarize what blocks ``task`` and offer the strategies."""
    tz = parse_utc_offset(user.utc_offset)
    lines = [
        f'I couldn\'t find a free slot for *"{task.title}"* '
        f"({task.priority.value} priority) before {format_instant(request.horizon_end, tz)}.",
        f"It needs {format_window(request.required_window, tz)} or a similar window.",
    ]
    if request.internal_conflicts:
        lines.append("")
        lines.append("*Conflicting tasks:*")
        for conflict in request.internal_conflicts:
            marker = " (lower priority)" if conflict.priority_relevant else ""
            lines.append(
                f"• {conflict.title}: {format_window(conflict.window, tz)}{marker}"
            )
    if request.external_conflicts:
        lines.append("")
        lines.append("*Calendar events:*")
        for slot in request.external_conflicts:
            lines.append(f"• {slot.title or 'Busy'}: {format_window(slot, tz)}")
    lines.append("")
    lines.append("How should I handle it?")

    options = [
        DecisionOption(kind=kind, label=label)
        for kind, label in DECISION_OPTIONS
        if kind != ResolutionKind.BUMP or request.internal_conflicts
    ]
    return DecisionRequest(
        correlation_id=request.correlation_id,
        title=f"Scheduling conflict: {task.title}",
        summary="\n".join(lines),
        options=options,
        internal_conflicts=request.internal_conflicts,
        external_conflicts=request.external_conflicts,
    )


def render_outcome(task: Task, user: User, outcome: ResolutionOutcome) -> tuple[str, str] | None:
    """Return (title, text) for a result notification, or None when silent."""
    tz = parse_utc_offset(user.utc_offset)
    automatic = outcome.strategy == ResolutionKind.TIMEOUT.value
    prefix = "No decision arrived in time, so I picked a slot automatically. " if automatic else ""

    if outcome.status == OutcomeStatus.SCHEDULED and outcome.window is not None:
        lines = [f'{prefix}*"{task.title}"* is scheduled for {format_window(outcome.window, tz)}.']
        if outcome.moved:
            lines.append("")
            lines.append("Moved to make room:")
            lines.extend(
                f"• {m.title}: now {format_window(m.to_window, tz)}" for m in outcome.moved
            )
        if outcome.not_moved:
            lines.append("")
            lines.append("Could not be moved: " + ", ".join(outcome.not_moved))
        if outcome.overlaps:
            lines.append("")
            lines.append("No free time was left, so it overlaps: " + ", ".join(outcome.overlaps))
        return "Task scheduled", "\n".join(lines)

    if outcome.status == OutcomeStatus.SKIPPED:
        return "Task skipped", f'*"{task.title}"* was skipped and will not be scheduled.'

    if outcome.status == OutcomeStatus.MANUAL:
        lines = [
            f'{prefix}I couldn\'t place *"{task.title}"* automatically'
            f"{': ' + outcome.detail if outcome.detail else ''}.",
            "Please schedule it manually.",
        ]
        if outcome.not_moved:
            lines.append("Could not be moved: " + ", ".join(outcome.not_moved))
        return "Manual scheduling needed", "\n".join(lines)

    if outcome.status == OutcomeStatus.UNRESOLVED:
        return (
            "Task still unscheduled",
            f'*"{task.title}"* could not be forced into your calendar because no '
            "working-hours window exists. Pick another option.",
        )

    if outcome.status == OutcomeStatus.FAILED:
        return (
            "Scheduling failed",
            f'Something went wrong while scheduling *"{task.title}"*. '
            "The conflict is still open; please try again.",
        )

    # NOOP stays silent; RECONNECT_REQUIRED is covered by the reconnect notice
    return None
