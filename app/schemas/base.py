"""
Shared schema configuration.
"""
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Readable straight from ORM rows; enums serialize as their values."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


class IDSchema(BaseSchema):
    id: UUID


class ErrorResponse(BaseSchema):
    """Body returned for every domain error."""
    detail: str
    error: str
