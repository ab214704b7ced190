"""Pydantic schemas for goal disclosure requests and results."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tribe_engine.domain.visibility import AccessTier, GoalRecord, OkrRecord, VisibilityDecision


class MemberContext(BaseModel):
    """A user's identity, tribe memberships and level."""

    user_id: str
    group_ids: list[str] = Field(default_factory=list)
    level: int = Field(1, ge=1)


class OkrPayload(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    okr_id: str
    shared_with: list[str] = Field(default_factory=list, description="Tribe ids; empty inherits the goal default")

    def to_domain(self) -> OkrRecord:
        return OkrRecord(okr_id=self.okr_id, shared_with=frozenset(self.shared_with))


class GoalPayload(BaseModel):
    """A goal as stored.

    visibility is deliberately untyped: stored values are passed through
    unchanged and unknown ones are resolved as PRIVATE.
    """

    model_config = ConfigDict(from_attributes=True)

    goal_id: str
    owner_id: str
    visibility: Any = None
    okrs: list[OkrPayload] = Field(default_factory=list)

    def to_domain(self) -> GoalRecord:
        return GoalRecord(
            goal_id=self.goal_id,
            owner_id=self.owner_id,
            visibility=self.visibility,
            okrs=tuple(okr.to_domain() for okr in self.okrs),
        )


class GoalDisclosure(BaseModel):
    """Disclosure decision for one goal."""

    goal_id: str
    visible: bool
    access_tier: AccessTier
    disclosed_okr_ids: list[str] = Field(default_factory=list)
    is_empty: bool = Field(False, description="Visible, but no OKR is shared with the viewer")

    @classmethod
    def from_domain(cls, goal_id: str, decision: VisibilityDecision) -> "GoalDisclosure":
        return cls(
            goal_id=goal_id,
            visible=decision.visible,
            access_tier=decision.access_tier,
            disclosed_okr_ids=[okr.okr_id for okr in decision.disclosed_okrs],
            is_empty=decision.is_empty,
        )
