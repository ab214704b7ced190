"""XP/Level ledger.

Pure domain functions converting XP actions into ledger state.
No DB access, fully deterministic.

The caller persists the returned state. Two concurrent actions on the same
user must be serialized by the caller (read state, apply, write state under
one exclusive update); every function here returns a complete new state so
that update stays a single write.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from types import MappingProxyType

from tribe_engine.core.exceptions import UnknownActionError
from tribe_engine.domain.rounding import round_half_up

XP_PER_LEVEL = 1000

# Weekly pit stops, with a day of slack
STREAK_WINDOW_DAYS = 8


class XPAction(StrEnum):
    """Activity kinds that earn or cost XP."""

    FEEDBACK_GIVEN = "feedback_given"
    TASK_GENERATED = "task_generated"
    TASK_COMPLETED = "task_completed"
    SESSION_ATTENDED = "session_attended"
    PIT_STOP_COMPLETED = "pit_stop_completed"
    REFERRAL_OPENED = "referral_opened"
    KPI_RED = "kpi_red"
    KPI_GREEN = "kpi_green"
    OKR_RED = "okr_red"
    OKR_GREEN = "okr_green"
    QUARTER_ACHIEVED_KPI = "quarter_achieved_kpi"
    QUARTER_ACHIEVED_OKR = "quarter_achieved_okr"
    PIT_STOP_LATE = "pit_stop_late"
    PIT_STOP_MISSED = "pit_stop_missed"
    SESSION_MISSED = "session_missed"


@dataclass(frozen=True)
class XPTable:
    """Read-only XP points table plus the level size."""

    points: Mapping[XPAction, int]
    xp_per_level: int = XP_PER_LEVEL

    def __post_init__(self) -> None:
        # Freeze a private copy so callers cannot mutate the table afterwards
        object.__setattr__(self, "points", MappingProxyType(dict(self.points)))

    def points_for(self, action: XPAction | str) -> int:
        """Look up the signed point value for an action.

        Raises:
            UnknownActionError: action is not an XPAction or not in this table
        """
        try:
            kind = XPAction(action)
        except ValueError:
            raise UnknownActionError(action) from None
        if kind not in self.points:
            raise UnknownActionError(action)
        return self.points[kind]


DEFAULT_XP_TABLE = XPTable(
    points={
        XPAction.FEEDBACK_GIVEN: 1,
        XPAction.TASK_GENERATED: 2,
        XPAction.TASK_COMPLETED: 3,
        XPAction.SESSION_ATTENDED: 10,
        XPAction.PIT_STOP_COMPLETED: 20,
        XPAction.REFERRAL_OPENED: 50,
        XPAction.KPI_RED: 5,
        XPAction.KPI_GREEN: 10,
        XPAction.OKR_RED: 20,
        XPAction.OKR_GREEN: 50,
        XPAction.QUARTER_ACHIEVED_KPI: 40,
        XPAction.QUARTER_ACHIEVED_OKR: 200,
        XPAction.PIT_STOP_LATE: -5,
        XPAction.PIT_STOP_MISSED: -10,
        XPAction.SESSION_MISSED: -10,
    },
)


@dataclass(frozen=True)
class LedgerState:
    """Per-user XP counters.

    grit is derived from the two cumulative counters and is recomputed on
    every update; it is stored only as a cache for display and ranking.
    """

    cumulative_positive_xp: int = 0
    cumulative_negative_xp: int = 0
    current_xp_in_level: int = 0
    level: int = 1
    grit: int = 100

    @classmethod
    def initial(cls) -> "LedgerState":
        """State of a freshly registered user (full grit credit)."""
        return cls()


@dataclass(frozen=True)
class LedgerUpdate:
    """Result of applying one or more actions."""

    state: LedgerState
    amount_applied: int
    levels_gained: int = 0


def compute_grit(cumulative_positive_xp: int, cumulative_negative_xp: int) -> int:
    """Compute the Grit consistency percentage (0-100).

    Pure function -- deterministic, no side effects.

    Args:
        cumulative_positive_xp: Lifetime XP earned
        cumulative_negative_xp: Lifetime penalty XP, as a positive magnitude

    Returns:
        Integer percentage clamped to [0, 100]

    Edge cases:
        - Nothing earned, nothing lost: 100 (new users get full credit)
        - Nothing earned, some penalties: 0
    """
    if cumulative_positive_xp <= 0:
        return 0 if cumulative_negative_xp > 0 else 100

    ratio = 1 - cumulative_negative_xp / cumulative_positive_xp
    return max(0, min(100, round_half_up(ratio * 100)))


def apply_action(
    state: LedgerState,
    action: XPAction | str,
    table: XPTable = DEFAULT_XP_TABLE,
) -> LedgerUpdate:
    """Apply one XP action and return the complete new ledger state.

    Pure function -- no side effects, no DB access.

    Args:
        state: Current ledger state
        action: XP action kind (enum member or its string value)
        table: Points table to read the action's value from

    Returns:
        LedgerUpdate with the new state and the signed amount applied

    Raises:
        UnknownActionError: action is not in the table (caller contract violation)

    Rules:
        - Points are added to current_xp_in_level
        - Every full xp_per_level rolls over into one level (exact boundary rolls over)
        - A negative balance never reduces the level
        - Positive points feed cumulative_positive_xp, negative ones cumulative_negative_xp
        - Grit is recomputed from the updated counters
    """
    amount = table.points_for(action)

    current = state.current_xp_in_level + amount
    levels_gained = 0
    if current >= table.xp_per_level:
        levels_gained = current // table.xp_per_level
        current %= table.xp_per_level

    positive = state.cumulative_positive_xp
    negative = state.cumulative_negative_xp
    if amount > 0:
        positive += amount
    elif amount < 0:
        negative += -amount

    new_state = replace(
        state,
        cumulative_positive_xp=positive,
        cumulative_negative_xp=negative,
        current_xp_in_level=current,
        level=state.level + levels_gained,
        grit=compute_grit(positive, negative),
    )
    return LedgerUpdate(state=new_state, amount_applied=amount, levels_gained=levels_gained)


def apply_actions(
    state: LedgerState,
    actions: Iterable[XPAction | str],
    table: XPTable = DEFAULT_XP_TABLE,
) -> LedgerUpdate:
    """Apply a sequence of actions in order.

    Totals amount_applied and levels_gained across the batch. Raises on the
    first unknown action without returning a partial state.
    """
    total_amount = 0
    total_levels = 0
    for action in actions:
        update = apply_action(state, action, table)
        state = update.state
        total_amount += update.amount_applied
        total_levels += update.levels_gained
    return LedgerUpdate(state=state, amount_applied=total_amount, levels_gained=total_levels)


def xp_to_next_level(state: LedgerState, table: XPTable = DEFAULT_XP_TABLE) -> int:
    """XP still needed before the next level-up."""
    return table.xp_per_level - state.current_xp_in_level


def next_streak(
    last_pit_stop_at: datetime | None,
    current_streak: int,
    now: datetime | None = None,
) -> int:
    """Pit-stop streak after logging a new pit stop.

    Args:
        last_pit_stop_at: When the previous pit stop was logged, None for the first one
        current_streak: Streak stored on the user before this pit stop
        now: Current time (injectable for testing, defaults to datetime.now(timezone.utc))

    Returns:
        current_streak + 1 when the previous pit stop is at most
        STREAK_WINDOW_DAYS old, otherwise 1
    """
    if last_pit_stop_at is None:
        return 1
    if now is None:
        now = datetime.now(timezone.utc)
    if now - last_pit_stop_at <= timedelta(days=STREAK_WINDOW_DAYS):
        return current_streak + 1
    return 1
