"""Client-side auth session with allow-list enforcement."""
import logging
from collections.abc import Callable
from dataclasses import dataclass

from client.errors import ParsedApiError
from core.authorization import AuthorizationPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignedInUser:
    """Identity reported by the auth provider for the current session."""

    user_id: str
    email: str | None
    name: str | None = None


class AuthSession:
    """
    Tracks the signed-in user and their access token.

    A user who authenticates with the identity provider but fails the allow-list is
    signed out immediately: the `on_sign_out` callback invalidates the provider
    session rather than merely hiding UI.
    """

    def __init__(
        self,
        policy: AuthorizationPolicy,
        on_sign_out: Callable[[], None] | None = None,
    ) -> None:
        self._policy = policy
        self._on_sign_out = on_sign_out
        self.user: SignedInUser | None = None
        self.token: str | None = None

    @property
    def is_authorized(self) -> bool:
        """True when a user is signed in and admitted."""
        return self.user is not None

    def sign_in(self, user: SignedInUser | None, token: str | None = None) -> bool:
        """
        Record a session change reported by the identity provider.

        Returns True if the user is now signed in and authorized.
        """
        if user is None:
            self.user = None
            self.token = None
            return False

        if not self._policy.is_authorized(user.email):
            logger.info("User is not authorized, signing out")
            self.sign_out()
            return False

        self.user = user
        self.token = token
        return True

    def sign_out(self) -> None:
        """Drop the local session and invalidate it with the provider."""
        self.user = None
        self.token = None
        if self._on_sign_out is not None:
            self._on_sign_out()

    def handle_api_error(self, error: ParsedApiError) -> bool:
        """
        Sign out if the server rejected the principal via the allow-list.

        Returns True if the session was terminated.
        """
        if error.is_unauthorized_user:
            self.sign_out()
            return True
        return False
