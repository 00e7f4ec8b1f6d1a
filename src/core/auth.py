"""
Authentication for Supabase access tokens and OIDC (JWKS) ID tokens.

Two providers are supported, selected by `AUTH_PROVIDER`:

- `supabase`: HS256 access tokens signed with the project's JWT secret. The owner
  identity stored on bookmarks is the Supabase account id (`sub`).
- `oidc`: RS256 tokens verified against the issuer's JWKS (NextAuth-style Google/GitHub
  sign-in). The owner identity stored on bookmarks is the account email.

After authentication, the allow-list policy decides admission. A principal that is
authenticated but not admitted receives 403, distinct from the 401 of a missing or
invalid session.
"""
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from core.authorization import AllowedEmailPolicy, AuthorizationPolicy
from core.config import Settings, get_settings

logger = logging.getLogger(__name__)


# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)

# Cache for JWKS client (reuse across requests)
_jwks_clients: dict[str, PyJWKClient] = {}

DEV_PRINCIPAL_ID = "dev|local-development-user"
DEV_PRINCIPAL_EMAIL = "dev@localhost"
UNKNOWN_USER_NAME = "Unknown"
UNAUTHORIZED_USER_DETAIL = "Access denied - Unauthorized user"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller as seen by the bookmark API."""

    user_id: str
    email: str | None
    name: str = UNKNOWN_USER_NAME


class AuthProvider(Protocol):
    """Validates a bearer token and returns the principal it identifies."""

    def authenticate(self, token: str) -> Principal:
        """
        Validate `token`.

        Raises:
            HTTPException: 401 if the token is invalid, 503 if keys cannot be fetched.
        """
        ...


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode(token: str, key: Any, algorithms: list[str], **kwargs: Any) -> dict:
    """Decode a JWT, mapping PyJWT failures to 401 responses."""
    try:
        return jwt.decode(token, key, algorithms=algorithms, **kwargs)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidAudienceError:
        raise _unauthorized("Invalid audience")
    except jwt.InvalidIssuerError:
        raise _unauthorized("Invalid issuer")
    except jwt.PyJWTError as e:
        # Log full details for debugging (server-side only)
        logger.warning("JWT validation failed: %s", e)
        raise _unauthorized("Invalid token")


class SupabaseAuthProvider:
    """Validates Supabase-issued HS256 access tokens."""

    def __init__(self, jwt_secret: str, audience: str = "authenticated") -> None:
        self._jwt_secret = jwt_secret
        self._audience = audience

    def authenticate(self, token: str) -> Principal:
        """Validate the access token and build a principal keyed by account id."""
        if not self._jwt_secret:
            logger.error("SUPABASE_JWT_SECRET is not configured")
            raise _unauthorized("Invalid token")

        payload = _decode(token, self._jwt_secret, ["HS256"], audience=self._audience)

        user_id = payload.get("sub")
        if not user_id:
            raise _unauthorized("Invalid token: missing sub claim")

        metadata = payload.get("user_metadata") or {}
        name = metadata.get("full_name") or metadata.get("name") or UNKNOWN_USER_NAME
        return Principal(user_id=user_id, email=payload.get("email"), name=name)


def get_jwks_client(jwks_url: str) -> PyJWKClient:
    """Get or create a cached JWKS client for the given URL."""
    if jwks_url not in _jwks_clients:
        _jwks_clients[jwks_url] = PyJWKClient(
            jwks_url,
            cache_jwk_set=True,
            lifespan=3600,  # Cache keys for 1 hour
        )
    return _jwks_clients[jwks_url]


class OidcAuthProvider:
    """Validates RS256 ID tokens against the issuer's JWKS."""

    def __init__(self, issuer: str, audience: str, jwks_url: str) -> None:
        self._issuer = issuer
        self._audience = audience
        self._jwks_url = jwks_url

    def authenticate(self, token: str) -> Principal:
        """Validate the ID token and build a principal keyed by email."""
        try:
            signing_key = get_jwks_client(self._jwks_url).get_signing_key_from_jwt(token)
        except jwt.PyJWKClientConnectionError as e:
            logger.error("Failed to fetch JWKS from %s: %s", self._jwks_url, e)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not validate credentials",
            )
        except jwt.PyJWTError as e:
            logger.warning("JWT signing key lookup failed: %s", e)
            raise _unauthorized("Invalid token")

        payload = _decode(
            token,
            signing_key.key,
            ["RS256"],
            audience=self._audience,
            issuer=self._issuer,
        )

        email = payload.get("email")
        if not email:
            raise _unauthorized("Invalid token: missing email claim")

        return Principal(
            user_id=email,
            email=email,
            name=payload.get("name") or UNKNOWN_USER_NAME,
        )


def build_auth_provider(settings: Settings) -> AuthProvider:
    """Create the provider selected by configuration."""
    if settings.auth_provider == "oidc":
        return OidcAuthProvider(
            issuer=settings.oidc_issuer,
            audience=settings.oidc_audience,
            jwks_url=settings.oidc_jwks_url,
        )
    return SupabaseAuthProvider(
        jwt_secret=settings.supabase_jwt_secret,
        audience=settings.supabase_jwt_audience,
    )


def get_auth_provider(settings: Settings = Depends(get_settings)) -> AuthProvider:
    """Dependency returning the configured authentication provider."""
    return build_auth_provider(settings)


def get_authorization_policy(
    settings: Settings = Depends(get_settings),
) -> AuthorizationPolicy:
    """Dependency returning the configured authorization predicate."""
    return AllowedEmailPolicy(settings.allowed_email)


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
    provider: AuthProvider = Depends(get_auth_provider),
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
) -> Principal:
    """
    Dependency that validates the token and applies the allow-list.

    In DEV_MODE, token validation is bypassed and a local development principal is
    returned (the allow-list still applies).
    """
    if settings.dev_mode:
        principal = Principal(
            user_id=DEV_PRINCIPAL_ID,
            email=DEV_PRINCIPAL_EMAIL,
            name="Local Developer",
        )
    else:
        if credentials is None:
            raise _unauthorized("Not authenticated")
        principal = provider.authenticate(credentials.credentials)

    if not policy.is_authorized(principal.email):
        logger.info("Rejected principal not on the allow-list: %s", principal.user_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=UNAUTHORIZED_USER_DETAIL,
        )

    return principal
