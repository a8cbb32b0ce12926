"""
Extract offset/limit pagination from query parameters.

Example query:
    GET /api/v1/questions?limit=10&offset=0

Both parameters must be given together; without either of them the whole
result set is returned from the start.
"""

from collections.abc import Mapping

from app.core.errors import MissingParametersError, ParseError
from app.domain.types import Pagination


def _parse_non_negative(raw: str) -> int:
    try:
        value = int(raw)
        if value < 0:
            raise ValueError(f"negative value {value}")
    except ValueError as e:
        raise ParseError(raw, e) from e
    return value


def extract_pagination(params: Mapping[str, str]) -> Pagination:
    """
    Build a Pagination from query parameters.

    Args:
        params: Query parameters as a string mapping

    Returns:
        Pagination (defaults to no limit, offset 0 when neither key is present)

    Raises:
        MissingParametersError: If only one of limit/offset is given
        ParseError: If a value is not a non-negative integer

    Example:
        >>> extract_pagination({"limit": "10", "offset": "1"})
        Pagination(limit=10, offset=1)
    """
    has_limit = "limit" in params
    has_offset = "offset" in params

    if not has_limit and not has_offset:
        return Pagination()

    if not (has_limit and has_offset):
        missing = "offset" if has_limit else "limit"
        raise MissingParametersError(details={"missing": missing})

    return Pagination(
        limit=_parse_non_negative(params["limit"]),
        offset=_parse_non_negative(params["offset"]),
    )


def extract_question_id(params: Mapping[str, str]) -> int | None:
    """Parse the optional `question_id` filter of the answers listing."""
    raw = params.get("question_id")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ParseError(raw, e) from e
