# This project was developed with assistance from AI tools.
"""Row change events pushed by Supabase Realtime (postgres_changes)."""

import enum
from datetime import datetime

from pydantic import BaseModel, Field


class ChangeType(str, enum.Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ChangeEvent(BaseModel):
    table: str
    type: ChangeType
    commit_timestamp: datetime | None = None
    record: dict = Field(default_factory=dict)
    old_record: dict = Field(default_factory=dict)

    @property
    def row_id(self) -> str | None:
        row = self.old_record if self.type == ChangeType.DELETE else self.record
        value = row.get("id") or self.record.get("id") or self.old_record.get("id")
        return str(value) if value is not None else None

    @classmethod
    def from_payload(cls, payload: dict) -> "ChangeEvent":
        """Accept both the wire format (type/record/old_record) and the
        client-library format (eventType/new/old)."""
        data = payload.get("data", payload)
        return cls(
            table=data["table"],
            type=data.get("type") or data.get("eventType"),
            commit_timestamp=data.get("commit_timestamp"),
            record=data.get("record") or data.get("new") or {},
            old_record=data.get("old_record") or data.get("old") or {},
        )
