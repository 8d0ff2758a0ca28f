"""Shared base for request/response schemas."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Schema base: camelCase on the wire, snake_case in Python.

    Input is accepted under either spelling; responses are serialized by alias.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(APIModel):
    """Plain acknowledgement body."""

    message: str


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Store timestamps as naive UTC, matching ``datetime.utcnow()`` columns."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
