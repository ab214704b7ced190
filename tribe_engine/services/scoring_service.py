"""ScoringService: entry point for the collaborators that own persistence.

Validates the records they hand in, calls the domain functions with the
process-wide scoring tables, logs outcomes, and returns schema models for
them to store or render. All methods are pure orchestration - no business
logic (that's in the domain layer) and no I/O.
"""

from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from tribe_engine.core.exceptions import InvalidRecordError, UnknownActionError
from tribe_engine.core.scoring_config import ScoringConfig, get_scoring_config
from tribe_engine.domain.compatibility import rank_candidates
from tribe_engine.domain.global_score import global_score, rank_by_global_score
from tribe_engine.domain.ledger import XPAction, apply_action, apply_actions, xp_to_next_level
from tribe_engine.domain.visibility import resolve_visibility, visible_goals
from tribe_engine.schemas.ledger import ApplyActionResult, LedgerStateRecord
from tribe_engine.schemas.matchmaking import CandidateProfile, MatchmakingProfile, MatchScore
from tribe_engine.schemas.scores import LeaderboardEntry, ScoreInputsRecord
from tribe_engine.schemas.visibility import GoalDisclosure, GoalPayload, MemberContext

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _coerce(model: type[ModelT], data: ModelT | Mapping[str, Any]) -> ModelT:
    """Accept a schema instance or a plain mapping; raise InvalidRecordError on bad input."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidRecordError(model.__name__, str(e)) from e


class ScoringService:
    """Service layer for scoring, matchmaking and disclosure decisions.

    Stateless apart from the injected, immutable ScoringConfig; a single
    instance may be shared across threads and requests.
    """

    def __init__(self, config: ScoringConfig | None = None):
        """Initialize with dependency injection.

        Args:
            config: Scoring tables; defaults to the process-wide tables loaded from settings
        """
        self.config = config if config is not None else get_scoring_config()

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def apply_action(
        self,
        user_id: str,
        state: LedgerStateRecord | Mapping[str, Any],
        action: XPAction | str,
    ) -> ApplyActionResult:
        """Apply one XP action to a stored ledger state.

        The caller must read the prior state and write the returned one in a
        single exclusive update.

        Raises:
            InvalidRecordError: state record failed validation
            UnknownActionError: action is not in the XP table
        """
        record = _coerce(LedgerStateRecord, state)
        try:
            update = apply_action(record.to_domain(), action, self.config.xp_table)
        except UnknownActionError:
            logger.error("unknown_xp_action", user_id=user_id, action=str(action))
            raise

        logger.info(
            "xp_applied",
            user_id=user_id,
            action=str(action),
            amount=update.amount_applied,
            level=update.state.level,
            levels_gained=update.levels_gained,
            grit=update.state.grit,
        )
        return ApplyActionResult(
            state=LedgerStateRecord.from_domain(update.state),
            amount_applied=update.amount_applied,
            levels_gained=update.levels_gained,
            xp_to_next_level=xp_to_next_level(update.state, self.config.xp_table),
        )

    def apply_actions(
        self,
        user_id: str,
        state: LedgerStateRecord | Mapping[str, Any],
        actions: Iterable[XPAction | str],
    ) -> ApplyActionResult:
        """Apply a batch of XP actions in order (e.g. weekly penalty runs)."""
        record = _coerce(LedgerStateRecord, state)
        actions = list(actions)
        try:
            update = apply_actions(record.to_domain(), actions, self.config.xp_table)
        except UnknownActionError as e:
            logger.error("unknown_xp_action", user_id=user_id, action=str(e.action), batch_size=len(actions))
            raise

        logger.info(
            "xp_batch_applied",
            user_id=user_id,
            batch_size=len(actions),
            amount=update.amount_applied,
            level=update.state.level,
            levels_gained=update.levels_gained,
            grit=update.state.grit,
        )
        return ApplyActionResult(
            state=LedgerStateRecord.from_domain(update.state),
            amount_applied=update.amount_applied,
            levels_gained=update.levels_gained,
            xp_to_next_level=xp_to_next_level(update.state, self.config.xp_table),
        )

    # ------------------------------------------------------------------
    # Global score
    # ------------------------------------------------------------------

    def global_score(self, inputs: ScoreInputsRecord | Mapping[str, Any]) -> int:
        """Global Score of one user, as shown on profile pages and member lists."""
        record = _coerce(ScoreInputsRecord, inputs)
        return global_score(
            record.level,
            record.grit,
            record.current_xp,
            record.reputation_score,
            min_grit_factor=self.config.min_grit_factor,
        )

    def leaderboard(
        self,
        entries: Iterable[ScoreInputsRecord | Mapping[str, Any]],
        top_n: int | None = None,
    ) -> list[LeaderboardEntry]:
        """Top users by Global Score. top_n defaults to the configured leaderboard size."""
        records = [_coerce(ScoreInputsRecord, entry) for entry in entries]
        limit = self.config.leaderboard_size if top_n is None else top_n
        ranked = rank_by_global_score(
            (record.to_domain() for record in records),
            top_n=limit,
            min_grit_factor=self.config.min_grit_factor,
        )
        logger.debug("leaderboard_ranked", candidates=len(records), returned=len(ranked))
        return [LeaderboardEntry.from_domain(entry) for entry in ranked]

    # ------------------------------------------------------------------
    # Matchmaking
    # ------------------------------------------------------------------

    def match_candidates(
        self,
        profile: MatchmakingProfile | Mapping[str, Any],
        candidates: Iterable[CandidateProfile | Mapping[str, Any]],
    ) -> list[MatchScore]:
        """Score a user's profile against every candidate, best match first."""
        user = _coerce(MatchmakingProfile, profile).to_domain()
        records = [_coerce(CandidateProfile, candidate) for candidate in candidates]
        results = rank_candidates(
            user,
            ((record.candidate_id, record.profile.to_domain()) for record in records),
            self.config.criterion_weights,
        )
        logger.debug(
            "candidates_matched",
            candidates=len(records),
            best_score=results[0].score if results else None,
        )
        return [MatchScore(candidate_id=r.candidate_id, score=r.score) for r in results]

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------

    def resolve_goal(
        self,
        viewer: MemberContext | Mapping[str, Any],
        owner: MemberContext | Mapping[str, Any],
        goal: GoalPayload | Mapping[str, Any],
    ) -> GoalDisclosure:
        """Disclosure decision for one goal and one viewer."""
        viewer = _coerce(MemberContext, viewer)
        owner = _coerce(MemberContext, owner)
        goal = _coerce(GoalPayload, goal)

        decision = resolve_visibility(
            viewer.user_id,
            owner.user_id,
            viewer.group_ids,
            owner.group_ids,
            viewer.level,
            owner.level,
            goal.to_domain(),
        )
        return GoalDisclosure.from_domain(goal.goal_id, decision)

    def gps_view(
        self,
        viewer: MemberContext | Mapping[str, Any],
        owner: MemberContext | Mapping[str, Any],
        goals: Iterable[GoalPayload | Mapping[str, Any]],
    ) -> list[GoalDisclosure]:
        """Goals of `owner` that `viewer` may see, in stored order, with their OKRs."""
        viewer = _coerce(MemberContext, viewer)
        owner = _coerce(MemberContext, owner)
        records = [_coerce(GoalPayload, goal).to_domain() for goal in goals]

        visible = visible_goals(
            viewer.user_id,
            owner.user_id,
            viewer.group_ids,
            owner.group_ids,
            viewer.level,
            owner.level,
            records,
        )
        logger.info(
            "gps_view_resolved",
            viewer_id=viewer.user_id,
            owner_id=owner.user_id,
            goals_total=len(records),
            goals_visible=len(visible),
        )
        return [GoalDisclosure.from_domain(goal.goal_id, decision) for goal, decision in visible]
