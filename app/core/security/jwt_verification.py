"""
Session token issuance and verification.

Session tokens are HS256 JWTs carrying the account id together with
not-before (nbf) and expiry (exp) claims. The core only consumes the
verified Session; it never inspects tokens itself.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import settings
from app.core.errors import CredentialDecodeError, UnauthorizedError
from app.core.observability import set_account_id
from app.domain.types import Session

logger = logging.getLogger(__name__)

# Authorization header is optional at the HTTP level so that a missing token
# is reported through the service's own UnauthorizedError
_optional_security = HTTPBearer(auto_error=False)


def issue_token(account_id: int, now: datetime | None = None) -> str:
    """
    Issue a session token for an authenticated account.

    Args:
        account_id: Account the session belongs to
        now: Issue time (defaults to the current UTC time)

    Returns:
        Encoded JWT string
    """
    now = now or datetime.now(UTC)
    expires = now + timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, Any] = {
        "sub": str(account_id),
        "account_id": account_id,
        "nbf": now,
        "exp": expires,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str) -> Session:
    """
    Verify a session token and return the session it carries.

    Signature, not-before and expiry are checked by python-jose.

    Args:
        token: Encoded JWT string from the Authorization header

    Returns:
        Session with account id, nbf and exp

    Raises:
        CredentialDecodeError: If the token is malformed, tampered, expired
            or lacks the account id
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.warning(f"Session token verification failed: {e}")
        raise CredentialDecodeError(e) from e

    for claim in ("account_id", "nbf", "exp"):
        if not isinstance(payload.get(claim), int):
            logger.warning(f"Session token missing {claim} claim")
            raise CredentialDecodeError(f"missing {claim} claim")

    return Session(
        account_id=payload["account_id"],
        nbf=datetime.fromtimestamp(payload["nbf"], tz=UTC),
        exp=datetime.fromtimestamp(payload["exp"], tz=UTC),
    )


async def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_optional_security),
) -> Session:
    """
    FastAPI dependency resolving the authenticated principal.

    Usage:
        @router.post("/questions")
        async def add_question(session: CurrentSession, ...):
            owner = session.account_id

    Raises:
        UnauthorizedError: If the Authorization header is missing
        CredentialDecodeError: If the token does not verify
    """
    if credentials is None:
        logger.warning("Missing Authorization header")
        raise UnauthorizedError("Missing bearer token")

    session = verify_token(credentials.credentials)
    set_account_id(session.account_id)
    return session
