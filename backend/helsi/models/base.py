"""
Shared model base - records are stored and served with camelCase keys.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_storage(self) -> dict:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
