from __future__ import annotations

import hmac
import logging

from luxride.application.ports.identity import IdentityProviderPort


logger = logging.getLogger(__name__)


def sign_uid(uid: str, secret: str) -> str:
    signature = hmac.new(secret.encode("utf-8"), uid.encode("utf-8"), "sha256").hexdigest()
    return f"{uid}.{signature}"


def verify_token(token: str | None, secret: str | None, env: str) -> str | None:
    if not token:
        return None

    if not secret:
        if env.lower() in {"dev", "local"}:
            logger.warning("No token secret configured; accepting bare uid in dev mode")
            return token
        logger.error("Missing token secret for identity verification")
        return None

    try:
        uid, signature = token.rsplit(".", 1)
    except ValueError:
        return None
    if not uid:
        return None

    expected = hmac.new(secret.encode("utf-8"), uid.encode("utf-8"), "sha256").hexdigest()
    if not hmac.compare_digest(expected, signature):
        return None
    return uid


class TokenIdentityProvider(IdentityProviderPort):
    """Bearer tokens of the form `<uid>.<hmac-sha256 hex>`, as issued by the sign-in frontend."""

    def __init__(self, secret: str | None, env: str) -> None:
        self._secret = secret
        self._env = env

    def resolve_uid(self, token: str | None) -> str | None:
        return verify_token(token, self._secret, self._env)
