"""
Authorization predicates evaluated after a principal has been authenticated.

The deployment is single-tenant: at most one external identity is admitted when an
allow-list value is configured. Call sites only depend on `AuthorizationPolicy`, so a
multi-user ACL can replace `AllowedEmailPolicy` without touching them.
"""
from typing import Protocol


class AuthorizationPolicy(Protocol):
    """Decides whether an authenticated principal may use owner-scoped endpoints."""

    def is_authorized(self, email: str | None) -> bool:
        """Return True if the principal identified by `email` is admitted."""
        ...


class AllowedEmailPolicy:
    """
    Admit a single configured email address.

    If no allowed email is configured (None or blank), every authenticated principal
    is admitted. Otherwise only an exact match is admitted; a principal without an
    email is never admitted.
    """

    def __init__(self, allowed_email: str | None) -> None:
        self._allowed_email = allowed_email.strip() if allowed_email else None

    @property
    def is_open(self) -> bool:
        """True when no allow-list value is configured."""
        return not self._allowed_email

    def is_authorized(self, email: str | None) -> bool:
        """Return True if `email` passes the allow-list."""
        if self.is_open:
            return True
        return email == self._allowed_email
