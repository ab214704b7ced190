"""Goal and OKR disclosure rules.

Pure domain functions deciding how much of a user's goal data a viewer may
see. No DB access, fully deterministic, never raises.

Access tier is recomputed on every request: group memberships and levels
change over time, so a tier is never cached.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

import structlog

logger = structlog.get_logger(__name__)


class Visibility(StrEnum):
    """Declared visibility of a goal."""

    PRIVATE = "PRIVATE"
    TRIBE = "TRIBE"
    PUBLIC = "PUBLIC"


class AccessTier(StrEnum):
    """Relationship between a viewer and the owner of the data."""

    SELF = "self"
    SHARED_GROUP = "shared_group"
    HIGHER_OR_EQUAL_LEVEL = "higher_or_equal_level"
    STRANGER = "stranger"


# Tiers allowed to see TRIBE goals. Level alone never unlocks them.
TRIBE_TIERS = frozenset({AccessTier.SELF, AccessTier.SHARED_GROUP})


@dataclass(frozen=True)
class OkrRecord:
    """An OKR under a goal.

    An empty shared_with inherits the goal's tribe-wide default.
    """

    okr_id: str
    shared_with: frozenset[str] = frozenset()


@dataclass(frozen=True)
class GoalRecord:
    """A goal with its OKRs.

    visibility is kept exactly as stored and parsed at resolution time, so
    a corrupt value still goes through the fail-closed path.
    """

    goal_id: str
    owner_id: str
    visibility: object
    okrs: tuple[OkrRecord, ...] = ()


@dataclass(frozen=True)
class VisibilityDecision:
    """Outcome of a disclosure check.

    visible=True with no disclosed OKRs means "visible but nothing shared",
    which callers render as a placeholder rather than hiding the goal.
    """

    visible: bool
    access_tier: AccessTier
    disclosed_okrs: tuple[OkrRecord, ...] = ()

    @classmethod
    def hidden(cls, access_tier: AccessTier) -> "VisibilityDecision":
        return cls(visible=False, access_tier=access_tier)

    @property
    def is_empty(self) -> bool:
        return self.visible and not self.disclosed_okrs


def parse_visibility(raw: object) -> Visibility:
    """Parse a stored visibility value.

    Anything that is not one of the known values (ASCII, case-insensitive)
    is treated as PRIVATE. Never falls back to a more permissive value.
    Non-ASCII input is rejected before case mapping: "publıc".upper() is
    "PUBLIC".
    """
    if isinstance(raw, Visibility):
        return raw
    if isinstance(raw, str) and raw.isascii():
        match raw.strip().upper():
            case "PUBLIC":
                return Visibility.PUBLIC
            case "TRIBE":
                return Visibility.TRIBE
            case "PRIVATE":
                return Visibility.PRIVATE
    logger.warning("unknown_visibility_treated_as_private", raw_value=repr(raw))
    return Visibility.PRIVATE


def resolve_access_tier(
    viewer_id: str,
    target_id: str,
    viewer_groups: Iterable[str],
    target_groups: Iterable[str],
    viewer_level: int,
    target_level: int,
) -> AccessTier:
    """Derive the viewer's access tier for a target user.

    Rules, first match wins:
        - SELF: viewer is the target
        - SHARED_GROUP: viewer and target share at least one group
        - HIGHER_OR_EQUAL_LEVEL: viewer's level >= target's level
        - STRANGER: everyone else
    """
    if viewer_id == target_id:
        return AccessTier.SELF
    if not set(viewer_groups).isdisjoint(target_groups):
        return AccessTier.SHARED_GROUP
    if viewer_level >= target_level:
        return AccessTier.HIGHER_OR_EQUAL_LEVEL
    return AccessTier.STRANGER


def disclose_okrs(okrs: Sequence[OkrRecord], viewer_groups: Iterable[str]) -> tuple[OkrRecord, ...]:
    """Filter a TRIBE goal's OKRs by their explicit share-lists."""
    groups = frozenset(viewer_groups)
    return tuple(okr for okr in okrs if not okr.shared_with or not okr.shared_with.isdisjoint(groups))


def resolve_visibility(
    viewer_id: str,
    target_id: str,
    viewer_groups: Iterable[str],
    target_groups: Iterable[str],
    viewer_level: int,
    target_level: int,
    goal: GoalRecord,
) -> VisibilityDecision:
    """Decide whether a goal is disclosed to a viewer, and which OKRs.

    Pure function -- no side effects, no DB access.

    Args:
        viewer_id: User requesting the data
        target_id: Owner of the goal
        viewer_groups: Group (tribe) ids the viewer belongs to
        target_groups: Group (tribe) ids the owner belongs to
        viewer_level: Viewer's level
        target_level: Owner's level
        goal: The goal with its OKRs

    Returns:
        VisibilityDecision (hidden, or visible with the disclosed OKRs)

    Rules:
        - The owner sees every goal and every OKR
        - PRIVATE: hidden from everyone else
        - PUBLIC: visible with all OKRs
        - TRIBE: visible to SHARED_GROUP viewers only; OKRs with a share-list
          are disclosed only if the viewer is in one of the listed groups
        - Unknown visibility values are handled as PRIVATE
        - A goal not owned by target_id is hidden from everyone
    """
    viewer_groups = frozenset(viewer_groups)
    tier = resolve_access_tier(
        viewer_id, target_id, viewer_groups, target_groups, viewer_level, target_level
    )

    if goal.owner_id != target_id:
        logger.warning(
            "goal_owner_mismatch",
            goal_id=goal.goal_id,
            owner_id=goal.owner_id,
            target_id=target_id,
        )
        return VisibilityDecision.hidden(tier)

    if tier is AccessTier.SELF:
        return VisibilityDecision(visible=True, access_tier=tier, disclosed_okrs=tuple(goal.okrs))

    match parse_visibility(goal.visibility):
        case Visibility.PUBLIC:
            return VisibilityDecision(visible=True, access_tier=tier, disclosed_okrs=tuple(goal.okrs))
        case Visibility.TRIBE if tier in TRIBE_TIERS:
            return VisibilityDecision(
                visible=True,
                access_tier=tier,
                disclosed_okrs=disclose_okrs(goal.okrs, viewer_groups),
            )
        case _:
            # PRIVATE, TRIBE without a shared group, and anything else
            return VisibilityDecision.hidden(tier)


def visible_goals(
    viewer_id: str,
    target_id: str,
    viewer_groups: Iterable[str],
    target_groups: Iterable[str],
    viewer_level: int,
    target_level: int,
    goals: Iterable[GoalRecord],
) -> list[tuple[GoalRecord, VisibilityDecision]]:
    """Resolve a target's goal list for one viewer.

    Returns only the visible goals, in input order, each with its decision.
    """
    viewer_groups = frozenset(viewer_groups)
    target_groups = frozenset(target_groups)
    results = []
    for goal in goals:
        decision = resolve_visibility(
            viewer_id, target_id, viewer_groups, target_groups, viewer_level, target_level, goal
        )
        if decision.visible:
            results.append((goal, decision))
    return results
