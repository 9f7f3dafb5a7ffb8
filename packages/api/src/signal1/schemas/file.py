# This project was developed with assistance from AI tools.
"""Uploaded file schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from . import SupabaseRow


class StoredFile(SupabaseRow):
    """Row of ``broker_files`` or ``lender_files``.

    ``owner_id`` is read from whichever owner column the table uses.
    """

    id: str
    owner_id: str
    file_name: str | None = None
    file_url_path: str
    file_type: str | None = None
    file_size: int | None = None
    extracted_summary: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict, owner_column: str) -> "StoredFile":
        return cls.model_validate({**row, "owner_id": row[owner_column]})


class FileUpload(BaseModel):
    """A file selected for upload, before anything is sent."""

    file_name: str
    content_type: str
    data: bytes = Field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)
