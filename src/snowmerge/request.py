from __future__ import annotations

from typing import Any, FrozenSet, List

from pydantic import BaseModel, Field, field_validator

from .maps import normalize_scope
from .options import ALL_EXCEPT_GARAGE_CONTENTS, MergeOption, options_from_bitmask, parse_options
from .save.models import check_slot


class MergeRequest(BaseModel):
    """What to merge: slots of both saves, the target slot, categories and maps."""

    incoming_slot: int = Field(0, description="Slot of the uploaded save (0-3)")
    base_slot: int = Field(0, description="Slot of the stored group save (0-3)")
    output_slot: int = Field(0, description="Slot the merged save is written for (0-3)")
    options: FrozenSet[MergeOption] = Field(
        default=ALL_EXCEPT_GARAGE_CONTENTS,
        description="Progress categories taken from the stored save",
    )
    map_scope: List[str] = Field(default_factory=list, description="Map identifiers to merge; empty means all maps")

    @field_validator("incoming_slot", "base_slot", "output_slot", mode="before")
    @classmethod
    def ensure_valid_slot(cls, v: Any) -> int:
        # InvalidSaveSlot propagates unwrapped, not as a ValidationError.
        return check_slot(v)

    @field_validator("options", mode="before")
    @classmethod
    def coerce_options(cls, v: Any) -> FrozenSet[MergeOption]:
        if isinstance(v, bool):
            raise ValueError("options must be a bitmask or a list of option names")
        if isinstance(v, int):
            return options_from_bitmask(v)
        if isinstance(v, str):
            return parse_options(v.split(","))
        return parse_options(v or ())

    @field_validator("map_scope", mode="before")
    @classmethod
    def clean_map_scope(cls, v: Any) -> List[str]:
        if isinstance(v, str):
            v = v.split(",")
        return normalize_scope(v)
