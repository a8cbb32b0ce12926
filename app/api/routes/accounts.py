"""
FastAPI routes for registration and login.

Registration stores the password hash; login verifies it and issues a
session token consumed by the authenticated routes.
"""

import logging

from fastapi import APIRouter

from app.api.schemas.account import AccountCredentials, TokenResponse
from app.core.dependencies import AsyncDbSession
from app.core.errors import WrongCredentialError
from app.core.security import hash_password, issue_token, verify_password
from app.repos import account_repo
from app.repos.common import commit

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Accounts"])


@router.post(
    "/registration",
    summary="Register an account",
    description="""
    Create an account for an e-mail address.

    **Errors:**
    - 422 `Account already exists`: the e-mail is already registered
    """,
)
async def register(payload: AccountCredentials, db: AsyncDbSession) -> dict[str, str]:
    account = await account_repo.create_account(
        db, payload.email, hash_password(payload.password)
    )
    await commit(db, "create_account")
    logger.info("Account registered", extra={"registered_account_id": account.id})
    return {"message": "Account added"}


@router.post("/login", response_model=TokenResponse, summary="Log in")
async def login(payload: AccountCredentials, db: AsyncDbSession) -> TokenResponse:
    """Exchange an e-mail/password pair for a session token."""
    account = await account_repo.get_account_by_email(db, payload.email)

    if not verify_password(payload.password, account.password):
        logger.warning("Wrong password", extra={"login_account_id": account.id})
        raise WrongCredentialError()

    return TokenResponse(access_token=issue_token(account.id))
