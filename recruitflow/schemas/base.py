"""
Base Pydantic schemas.

The public API speaks camelCase JSON; Python code uses snake_case names.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base schema for request and response bodies.

    Accepts both camelCase and snake_case on input and serializes by alias.
    Reads directly from SQLAlchemy models.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
