"""
Admin authentication through Cloudflare Access.

Access puts a signed JWT in the `Cf-Access-Jwt-Assertion` header (and the
`CF_Authorization` cookie). Tokens are verified against the team's JWKS.
When the team domain or audience is unset, auth is disabled and every caller
is treated as a local developer.
"""

import time
import logging
from typing import Optional
import jwt
from fastapi import Request
from zerolist import configs
from zerolist.core.emails import is_email_configured
from zerolist.core.exceptions import UnauthorizedError, InvalidCredentialsError

logger = logging.getLogger(__name__)

TOKEN_HEADER = "cf-access-jwt-assertion"
TOKEN_COOKIE = "CF_Authorization"
ALGORITHMS = ["RS256"]
DEV_USER_EMAIL = "dev@localhost"

# team domain -> PyJWKClient, which caches the fetched signing keys
_jwks_clients = {}


def is_access_configured() -> bool:
    return bool(configs.CF_ACCESS_TEAM_DOMAIN and configs.CF_ACCESS_AUD)

def get_jwks_client(team_domain: str) -> jwt.PyJWKClient:
    if team_domain not in _jwks_clients:
        _jwks_clients[team_domain] = jwt.PyJWKClient(f"{team_domain}/cdn-cgi/access/certs")
    return _jwks_clients[team_domain]

def get_token(request: Request) -> Optional[str]:
    return request.headers.get(TOKEN_HEADER) or request.cookies.get(TOKEN_COOKIE)

def verify_token(token: str) -> dict:
    """Decodes an Access JWT, checking signature, audience, issuer and expiry."""
    signing_key = get_jwks_client(configs.CF_ACCESS_TEAM_DOMAIN).get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=ALGORITHMS,
        audience=configs.CF_ACCESS_AUD,
        issuer=configs.CF_ACCESS_TEAM_DOMAIN,
    )

def dev_user() -> dict:
    now = int(time.time())
    return {"email": DEV_USER_EMAIL, "sub": "local-dev", "iat": now, "exp": now + 3600}

def get_user(request: Request) -> Optional[dict]:
    """The verified Access user, or None for a missing or invalid token."""
    if not (token := get_token(request)):
        return None
    try:
        claims = verify_token(token)
    except (jwt.PyJWTError, jwt.PyJWKClientError) as e:
        logger.error(f"[Auth] JWT verification failed: {e}")
        return None
    return {
        "email": claims.get("email"),
        "sub": claims.get("sub"),
        "iat": claims.get("iat"),
        "exp": claims.get("exp"),
    }


def require_admin(request: Request) -> dict:
    """Dependency guarding the admin API; stores the user on `request.state`."""
    if not is_access_configured():
        logger.debug("[Auth] Cloudflare Access not configured, skipping auth")
        user = dev_user()
    elif not get_token(request):
        raise UnauthorizedError()
    elif not (user := get_user(request)):
        raise InvalidCredentialsError()
    request.state.user = user
    return user

def check_auth(request: Request) -> dict:
    status = {
        "cfAccessConfigured": is_access_configured(),
        "transactionalEmailEnabled": is_email_configured(),
    }
    if not status["cfAccessConfigured"]:
        return {"authenticated": True, "user": {"email": DEV_USER_EMAIL}, **status}
    if user := get_user(request):
        return {"authenticated": True, "user": {"email": user["email"]}, **status}
    return {"authenticated": False, **status}
