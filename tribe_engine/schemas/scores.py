"""Pydantic schemas for Global Score inputs and leaderboard rows."""

from pydantic import BaseModel, ConfigDict, Field

from tribe_engine.domain.global_score import RankedEntry, ScoreInputs


class ScoreInputsRecord(BaseModel):
    """Ranking inputs of one user as loaded from storage."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    level: int = Field(1, ge=1)
    grit: int | None = Field(None, ge=0, le=100)
    current_xp: int = 0
    reputation_score: float = Field(0.0, ge=0)

    def to_domain(self) -> ScoreInputs:
        return ScoreInputs(
            user_id=self.user_id,
            level=self.level,
            grit=self.grit,
            current_xp=self.current_xp,
            reputation_score=self.reputation_score,
        )


class LeaderboardEntry(BaseModel):
    user_id: str
    score: int = Field(..., description="Global Score")
    position: int = Field(..., ge=1, description="1-based leaderboard position")

    @classmethod
    def from_domain(cls, entry: RankedEntry) -> "LeaderboardEntry":
        return cls(user_id=entry.user_id, score=entry.score, position=entry.position)
