"""
Pydantic schemas for Question API operations.

These schemas define the request/response structure for the question endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field


class QuestionBase(BaseModel):
    """Base schema with fields common to all Question operations."""

    title: str = Field(
        ...,
        min_length=1,
        description="Short title of the question",
        examples=["How do I paginate a query?"],
    )
    content: str = Field(
        ...,
        min_length=1,
        description="Body of the question",
        examples=["I want to skip the first 10 rows and return 5."],
    )
    tags: list[str] | None = Field(
        default=None,
        description="Optional list of tags",
        examples=[["sql", "pagination"]],
    )


class QuestionCreate(QuestionBase):
    """Schema for creating a new question. The owner comes from the session."""

    pass


class QuestionUpdate(QuestionBase):
    """Schema for replacing title, content and tags of a question.

    The owner cannot be changed and is not part of the payload.
    """

    pass


class QuestionResponse(QuestionBase):
    """Schema for question responses."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int = Field(..., description="Question identifier")
    owner: int = Field(
        ..., validation_alias="account_id", description="Account that asked the question"
    )
