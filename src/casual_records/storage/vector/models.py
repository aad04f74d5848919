from typing import List

from pydantic import BaseModel, Field

from casual_records.models import Record


class Embedding(BaseModel):
    """Derived vector for a record; deleted together with the record."""

    record_id: str
    vector: List[float]
    record: Record = Field(..., description="Snapshot of the record that was indexed")
