"""
Security module - session tokens and password hashing.

Submodules:

- jwt_verification.py: session token issuance/verification and the
  FastAPI dependency resolving the current principal
- passwords.py: password hashing and verification

Import directly from this module, or from submodules for more granular access.
"""

from .jwt_verification import (
    get_current_session,
    issue_token,
    verify_token,
)
from .passwords import hash_password, verify_password

__all__ = [
    "get_current_session",
    "hash_password",
    "issue_token",
    "verify_password",
    "verify_token",
]
