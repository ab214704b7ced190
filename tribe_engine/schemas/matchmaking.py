"""Pydantic schemas for matchmaking profiles and match scores."""

from pydantic import BaseModel, ConfigDict, Field

from tribe_engine.domain.compatibility import CriteriaProfile


class MatchmakingProfile(BaseModel):
    """Matchmaking answers of a user or a tribe.

    Multi-select answers are capped at three in the UI; any number is accepted here.
    """

    model_config = ConfigDict(from_attributes=True)

    age_range: str | None = None
    life_focus: list[str] = Field(default_factory=list)
    professional: str | None = None
    wealth: str | None = None
    execution: list[str] = Field(default_factory=list)
    personality: list[str] = Field(default_factory=list)
    health: str | None = None
    skills: list[str] = Field(default_factory=list)
    values: str | None = None
    social: str | None = None
    intent: str | None = None

    def to_domain(self) -> CriteriaProfile:
        return CriteriaProfile.from_mapping(self.model_dump())


class CandidateProfile(BaseModel):
    """A tribe or peer being considered for a match."""

    candidate_id: str
    profile: MatchmakingProfile


class MatchScore(BaseModel):
    candidate_id: str
    score: int = Field(..., ge=0, le=100, description="Compatibility score (0-100)")
