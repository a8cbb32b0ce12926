"""
SQLAlchemy 2.x ORM models for the Question & Answer API.

Models use the Mapped[] type annotation syntax and mapped_column.
Column names follow the persisted layout: answers reference their question
through `corresponding_question`, and every row records its owner in
`account_id`.
"""

from sqlalchemy import JSON, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# TEXT[] on PostgreSQL, JSON elsewhere (SQLite in local/test)
TagList = JSON().with_variant(ARRAY(Text), "postgresql")


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class Account(Base):
    """Registered account. The password column holds a hash, never plain text."""

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, email={self.email})>"


class Question(Base):
    """
    A question asked by an account.

    The owner (account_id) is set on creation and never changes.
    """

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[list[str] | None] = mapped_column(TagList, nullable=True)
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id"), nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<Question(id={self.id}, title={self.title!r}, account_id={self.account_id})>"


class Answer(Base):
    """
    An answer to a question.

    There is no ON DELETE CASCADE on corresponding_question: removing a
    question's answers is done explicitly by question_repo.delete_question.
    """

    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    corresponding_question: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id"), nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id"), nullable=False, index=True
    )

    def __repr__(self) -> str:
        return (
            f"<Answer(id={self.id}, corresponding_question={self.corresponding_question}, "
            f"account_id={self.account_id})>"
        )
