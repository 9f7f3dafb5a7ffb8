# This project was developed with assistance from AI tools.
"""Admin note schemas."""

from datetime import datetime

from . import SupabaseRow


class AdminNote(SupabaseRow):
    id: str
    user_id: str
    created_by: str
    note: str
    read: bool = False
    created_at: datetime | None = None
