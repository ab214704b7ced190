"""Pydantic schemas for ledger records exchanged with the persistence layer."""

from pydantic import BaseModel, ConfigDict, Field

from tribe_engine.domain.ledger import LedgerState


class LedgerStateRecord(BaseModel):
    """Stored XP counters of one user.

    grit is accepted for completeness but always recomputed on update.
    """

    model_config = ConfigDict(from_attributes=True)

    cumulative_positive_xp: int = Field(0, ge=0, description="Lifetime XP earned")
    cumulative_negative_xp: int = Field(0, ge=0, description="Lifetime penalty XP (positive magnitude)")
    current_xp_in_level: int = Field(0, description="XP accumulated toward the next level (may be negative)")
    level: int = Field(1, ge=1, description="Current level")
    grit: int = Field(100, ge=0, le=100, description="Cached Grit percentage")

    def to_domain(self) -> LedgerState:
        return LedgerState(
            cumulative_positive_xp=self.cumulative_positive_xp,
            cumulative_negative_xp=self.cumulative_negative_xp,
            current_xp_in_level=self.current_xp_in_level,
            level=self.level,
            grit=self.grit,
        )

    @classmethod
    def from_domain(cls, state: LedgerState) -> "LedgerStateRecord":
        return cls(
            cumulative_positive_xp=state.cumulative_positive_xp,
            cumulative_negative_xp=state.cumulative_negative_xp,
            current_xp_in_level=state.current_xp_in_level,
            level=state.level,
            grit=state.grit,
        )


class ApplyActionResult(BaseModel):
    """New ledger state for the caller to persist."""

    state: LedgerStateRecord
    amount_applied: int = Field(..., description="Signed XP applied")
    levels_gained: int = Field(0, ge=0, description="Levels gained by this update")
    xp_to_next_level: int = Field(..., description="XP still needed for the next level")
