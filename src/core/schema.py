from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Wire schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @field_serializer("*", mode="wrap", when_used="unless-none")
    def serialize_datetime(self, value, handler, info):
        """Custom serializer for datetime objects and enums"""
        result = handler(value)
        if isinstance(result, datetime):
            return result.isoformat()
        elif isinstance(result, Enum):
            return result.value
        return result


class ErrorResponse(BaseModel):
    success: bool = False
    type: str
    error: str
