from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, get_args

from pydantic import BaseModel, Field, field_validator

RecordType = Literal[
    "health_visit",
    "health_test",
    "health_lab",
    "receipt",
    "insurance",
    "id",
    "travel",
    "work_contract",
    "tax",
    "car",
    "home",
    "visa",
    "other",
]

RECORD_TYPES: tuple[str, ...] = get_args(RecordType)


def normalize_record_type(value: Optional[str]) -> str:
    """
    Map a free-form classification result onto the closed type set.

    Accepts hyphenated or mixed-case spellings ("Health-Visit") and
    falls back to "other" for anything unrecognized.
    """
    if not value:
        return "other"
    candidate = value.strip().strip(".\"'").lower().replace("-", "_").replace(" ", "_")
    if candidate in RECORD_TYPES:
        return candidate
    return "other"


class Record(BaseModel):
    """A personal document with its extracted text and metadata."""

    id: str = Field(..., description="Stable, globally unique identifier")
    type: RecordType = Field(default="other", description="Category from the fixed type set")
    content: str = Field(default="", description="Extracted text content")
    title: Optional[str] = Field(default=None, description="Human-readable title")
    description: Optional[str] = Field(default=None, description="Short description")
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Type-specific fields (vendor, amount, ...)"
    )
    tags: List[str] = Field(default_factory=list, description="Free-form labels")
    created_at: datetime = Field(
        default_factory=datetime.now, description="When the record was first stored"
    )
    updated_at: datetime = Field(
        default_factory=datetime.now, description="Last successful store/update"
    )

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: List[str]) -> List[str]:
        # first occurrence wins
        return list(dict.fromkeys(tags))

    def searchable_text(self) -> str:
        """Concatenate content, title and description (whichever are populated)."""
        parts = [self.content, self.title, self.description]
        return " ".join(part for part in parts if part)


class SearchResult(BaseModel):
    """A ranked hit returned by search."""

    record: Record
    score: float = Field(..., ge=0.0, le=1.0, description="Relevance score (0-1)")
