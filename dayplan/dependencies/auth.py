from typing import Optional

from fastapi import Header
from jose import jwt, JWTError
import logging

from dayplan.core import config
from dayplan.core.errors import AuthError

# === Setup logging
logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    return token or None


def verify_access_token(token: str) -> dict:
    """Exchange a bearer token for the caller identity, or raise AuthError."""
    try:
        payload = jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            audience=config.JWT_AUDIENCE,
            options={"verify_aud": config.JWT_AUDIENCE is not None},
        )
    except JWTError as e:
        logger.warning(f"⚠️ JWT decode failed: {str(e)}")
        raise AuthError()

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("⚠️ JWT missing 'sub' claim.")
        raise AuthError()

    return {
        "id": str(user_id),
        "email": payload.get("email"),
        "role": payload.get("role"),
    }


# === Auth Dependency
def get_current_user(authorization: Optional[str] = Header(None)) -> dict:
    token = extract_bearer_token(authorization)
    if not token:
        raise AuthError(code="missing_bearer_token")
    return verify_access_token(token)
