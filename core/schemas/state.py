"""
Module 01 - Schemas
File: state.py

Purpose: Per-identity state history entries and state transition input.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StateInfo(BaseModel):
    """
    One state an identity has published.

    A genesis state is recorded with zero creation time/block because it
    existed before the registry saw it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: int = Field(..., ge=0, description="Identity identifier")
    state: int = Field(..., ge=0, description="State commitment")
    replaced_by_state: int = Field(default=0, ge=0)
    created_at_timestamp: int = Field(default=0, ge=0)
    replaced_at_timestamp: int = Field(default=0, ge=0)
    created_at_block: int = Field(default=0, ge=0)
    replaced_at_block: int = Field(default=0, ge=0)

    def sealed(self, replaced_by_state: int, timestamp: int, block: int) -> "StateInfo":
        """Return a copy of this entry sealed by the identity's next state."""
        return self.model_copy(
            update={
                "replaced_by_state": replaced_by_state,
                "replaced_at_timestamp": timestamp,
                "replaced_at_block": block,
            }
        )


class StateTransition(BaseModel):
    """Input of a state transition submission."""

    model_config = ConfigDict(extra="forbid")

    id: int = Field(..., ge=0)
    old_state: int = Field(..., ge=0)
    new_state: int = Field(..., ge=0)
    is_old_state_genesis: bool = Field(default=False)
    proof: Any = Field(
        default=None,
        description="Opaque state transition proof, checked when a transition verifier is configured",
    )

    @property
    def public_inputs(self) -> list[int]:
        """Public signals of the state transition circuit."""
        return [self.id, self.old_state, self.new_state, int(self.is_old_state_genesis)]
