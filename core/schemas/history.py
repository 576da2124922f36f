"""
Module 01 - Schemas
File: history.py

Purpose: Root transition entries of the global identity state tree.
"""

from pydantic import BaseModel, ConfigDict, Field


class RootInfo(BaseModel):
    """
    One entry of the root history log.

    The replaced_* fields stay zero while the entry is the tail of the log
    and are written exactly once, when the next root supersedes it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    root: int = Field(..., ge=0, description="Tree root held from creation until replacement")
    replaced_by_root: int = Field(default=0, ge=0, description="Root that superseded this one")
    created_at_timestamp: int = Field(..., ge=0)
    replaced_at_timestamp: int = Field(default=0, ge=0)
    created_at_block: int = Field(..., ge=0)
    replaced_at_block: int = Field(default=0, ge=0)

    @property
    def is_current(self) -> bool:
        """True while no later root has replaced this one."""
        return self.replaced_at_timestamp == 0 and self.replaced_by_root == 0

    def sealed(self, replaced_by_root: int, timestamp: int, block: int) -> "RootInfo":
        """Return a copy of this entry sealed by its successor."""
        return self.model_copy(
            update={
                "replaced_by_root": replaced_by_root,
                "replaced_at_timestamp": timestamp,
                "replaced_at_block": block,
            }
        )
