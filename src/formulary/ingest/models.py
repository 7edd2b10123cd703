"""Data models for the ingestion layer."""
from __future__ import annotations

from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MedicineRecord(BaseModel):
    """Normalized metadata for a single medicine label."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier derived from source data")
    brand_name: str
    generic_formula: str
    dosage: str = "Oral"
    uses: Tuple[str, ...] = ("Medical Use",)
    is_common: bool = False

    @field_validator("brand_name", "generic_formula")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value:
            raise ValueError("must be non-empty")
        return value

    @field_validator("uses")
    @classmethod
    def _require_uses(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value or not all(value):
            raise ValueError("uses must contain at least one non-empty tag")
        return value


class LabelBatch(BaseModel):
    """Container for normalization results along with provenance metadata."""

    source_name: str
    records: List[MedicineRecord]
    issues: List[str] = Field(default_factory=list)
