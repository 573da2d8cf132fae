"""
Shared schema building blocks.

All API models serialize with camelCase keys (`firstName`, `toUserId`) while
the Python side keeps snake_case attribute names.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON, ORM-readable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    message: str = Field(description="Human-readable outcome")


class PaginationMeta(CamelModel):
    """
    Pagination block returned with list endpoints.

    Invariants:
        has_next == (current_page < total_pages)
        has_prev == (current_page > 1)
    """
    current_page: int = Field(description="Requested page number (1-indexed)")
    total_pages: int = Field(description="ceil(total_users / limit)")
    total_users: int = Field(description="Total number of users")
    has_next: bool = Field(description="Whether a later page exists")
    has_prev: bool = Field(description="Whether an earlier page exists")
