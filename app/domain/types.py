"""Domain value types shared by the repositories and the API layer."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Pagination:
    """Offset/limit window over an ordered result set.

    A limit of None means no upper bound.
    """

    limit: int | None = None
    offset: int = 0

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0, got {self.offset}")
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must be >= 0, got {self.limit}")


@dataclass(frozen=True)
class Session:
    """Principal identity decoded from a verified session token."""

    account_id: int
    nbf: datetime
    exp: datetime
