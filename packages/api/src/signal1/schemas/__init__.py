# This project was developed with assistance from AI tools.
"""Shared schema components."""

from pydantic import BaseModel, ConfigDict


class SupabaseRow(BaseModel):
    """Base for models validated from PostgREST rows; unknown columns are ignored."""

    model_config = ConfigDict(extra="ignore")
