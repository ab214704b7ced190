"""Rank enums and rank calculation.

Pure domain logic with no external dependencies.
"""
from datetime import datetime, timezone
from enum import IntEnum


class Rank(IntEnum):
    """Community ranks. Values are ordinal for comparison."""

    SCOUT = 1
    RANGER = 2
    GUARDIAN = 3
    CAPTAIN = 4
    COMMANDER = 5

    @property
    def display_name(self) -> str:
        return self.name.title()


def _months_between(start: datetime, end: datetime) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month)


def parse_rank(name: str | None) -> Rank | None:
    """Rank named by a manual override, or None if it names no rank."""
    if not name:
        return None
    return Rank.__members__.get(name.strip().upper())


def calculate_rank(
    created_at: datetime,
    task_completion_rate: float = 0.0,
    sessions_attended: int = 0,
    total_sponsorship: float = 0.0,
    has_go_giver: bool = False,
    manual_rank: str | None = None,
    now: datetime | None = None,
) -> Rank:
    """Compute a user's rank from tenure and track record.

    Pure function -- no side effects, no DB access.

    Rules (first match wins):
        - A manual override naming a known rank
        - CAPTAIN: >= 12 months active and task completion >= 0.85
        - GUARDIAN: >= 6 months active, sponsorship >= 500 and the Go-Giver badge
        - RANGER: attendance rate >= 0.8 and task completion >= 0.6
        - SCOUT otherwise

    Attendance rate is sessions / max(sessions, 10): ten sessions count as
    full attendance until a per-week history is available.
    """
    override = parse_rank(manual_rank)
    if override is not None:
        return override

    if now is None:
        now = datetime.now(timezone.utc)

    months_active = _months_between(created_at, now)
    attendance_rate = sessions_attended / max(sessions_attended, 10) if sessions_attended > 0 else 0.0

    if months_active >= 12 and task_completion_rate >= 0.85:
        return Rank.CAPTAIN
    if months_active >= 6 and total_sponsorship >= 500 and has_go_giver:
        return Rank.GUARDIAN
    if attendance_rate >= 0.8 and task_completion_rate >= 0.6:
        return Rank.RANGER
    return Rank.SCOUT


def is_at_least_rank(current: Rank, required: Rank) -> bool:
    return current >= required
