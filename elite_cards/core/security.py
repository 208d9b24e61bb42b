"""
Session tokens, cookies and shared-secret checks for Elite Cards.

Sessions are HS256 JWTs carrying the merchant id, shop domain and role. They
are stored in an HTTP-only cookie and verified on every request.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

import jwt
from fastapi import Response

from elite_cards.core.config import get_settings
from elite_cards.core.exceptions import ConfigurationError
from elite_cards.schemas.session import SessionClaims

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "session"
OAUTH_STATE_COOKIE_NAME = "shopify_oauth_state"
OAUTH_STATE_MAX_AGE = 300

_DEVELOPMENT_SECRET = "elite-cards-development-secret"
_warned_about_fallback = False


def _get_signing_key() -> str:
    """
    Return the session signing key.

    Raises:
        ConfigurationError: If JWT_SECRET is unset in production
    """
    global _warned_about_fallback
    settings = get_settings()
    if settings.JWT_SECRET:
        return settings.JWT_SECRET

    if settings.is_production:
        raise ConfigurationError("JWT_SECRET must be configured in production")

    if not _warned_about_fallback:
        logger.warning("JWT_SECRET is not set, using the development signing key")
        _warned_about_fallback = True
    return _DEVELOPMENT_SECRET


def create_session(claims: SessionClaims, max_age: Optional[int] = None) -> str:
    """
    Sign a session token for a merchant.

    Args:
        claims: Merchant id, shop domain and role
        max_age: Lifetime in seconds, defaults to SESSION_MAX_AGE

    Returns:
        str: Encoded JWT
    """
    settings = get_settings()
    lifetime = settings.SESSION_MAX_AGE if max_age is None else max_age
    now = datetime.now(timezone.utc)
    payload = claims.model_dump(by_alias=True, mode="json")
    payload.update({"iat": now, "exp": now + timedelta(seconds=lifetime)})
    return jwt.encode(payload, _get_signing_key(), algorithm=settings.JWT_ALGORITHM)


def verify_session(token: Optional[str]) -> Optional[SessionClaims]:
    """Return the session claims, or None for a missing, expired or tampered token."""
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            _get_signing_key(),
            algorithms=[get_settings().JWT_ALGORITHM],
            options={"require": ["exp"]},
        )
        return SessionClaims.model_validate(payload)
    except jwt.ExpiredSignatureError:
        logger.debug("Session token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid session token: {e}")
        return None
    except ValueError as e:
        # Signed but missing userId/shopDomain/role
        logger.debug(f"Session token has malformed claims: {e}")
        return None
    except ConfigurationError as e:
        logger.error(f"Cannot verify session: {e}")
        return None


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=get_settings().SESSION_MAX_AGE,
        path="/",
        httponly=True,
        secure=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=True,
        samesite="lax",
    )


def generate_oauth_state() -> str:
    return secrets.token_urlsafe(24)


def set_oauth_state_cookie(response: Response, state: str) -> None:
    response.set_cookie(
        key=OAUTH_STATE_COOKIE_NAME,
        value=state,
        max_age=OAUTH_STATE_MAX_AGE,
        path="/",
        httponly=True,
        secure=True,
        samesite="lax",
    )


def verify_bearer_secret(authorization: Optional[str], expected_secret: str) -> bool:
    """
    Check an `Authorization: Bearer <secret>` header in constant time.

    An empty expected secret never matches.
    """
    if not expected_secret or not authorization:
        return False
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token:
        return False
    return secrets.compare_digest(token.encode("utf8"), expected_secret.encode("utf8"))


def verify_shopify_hmac(params: Mapping[str, str], secret: str) -> bool:
    """
    Verify the HMAC Shopify appends to OAuth redirects.

    The message is every query parameter except `hmac` and `signature`,
    sorted by key and joined as `key=value` pairs with `&`. The digest is
    hex encoded SHA256.

    Args:
        params: Callback query parameters
        secret: Shopify app secret

    Returns:
        bool: True if the supplied hmac matches
    """
    received = params.get("hmac")
    if not received or not secret:
        return False

    message = "&".join(
        f"{key}={value}"
        for key, value in sorted(params.items())
        if key not in ("hmac", "signature")
    )
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()
    return hmac.compare_digest(digest, received)
