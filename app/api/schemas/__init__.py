"""
Pydantic schemas for API request/response validation.

This package contains schema definitions for different domain entities
used in API endpoints.
"""

# Re-export schemas for convenient imports.
from .account import AccountCredentials as AccountCredentials
from .account import TokenResponse as TokenResponse
from .answer import AnswerCreate as AnswerCreate
from .answer import AnswerResponse as AnswerResponse
from .question import (
    QuestionCreate as QuestionCreate,
)
from .question import (
    QuestionResponse as QuestionResponse,
)
from .question import (
    QuestionUpdate as QuestionUpdate,
)
