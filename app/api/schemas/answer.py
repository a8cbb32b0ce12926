"""Pydantic schemas for Answer API operations."""

from pydantic import BaseModel, ConfigDict, Field


class AnswerCreate(BaseModel):
    """Schema for answering an existing question."""

    content: str = Field(..., min_length=1, description="Body of the answer")
    question_id: int = Field(..., description="Question being answered")


class AnswerResponse(BaseModel):
    """Schema for answer responses."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    content: str
    question_id: int = Field(..., validation_alias="corresponding_question")
    owner: int = Field(..., validation_alias="account_id")
