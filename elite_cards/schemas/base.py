"""
Base schemas with common functionality.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema for records read from the database"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True
    )


class RequestSchema(BaseModel):
    """Base schema for JSON request bodies, which use camelCase keys"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True
    )
