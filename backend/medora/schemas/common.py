from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class MessageResponse(BaseModel):
    message: str


def reject_null(value):
    """For partial updates: a field may be left out, but not sent as null."""
    if value is None:
        raise ValueError("Field cannot be null")
    return value
