from datetime import datetime, timedelta
from typing import Optional, Dict, Any, Iterable
import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, ExpiredSignatureError, jwt
from sqlalchemy.orm import Session

from ngo_portal.constant_file import (
    jwt_secret_key,
    jwt_algorithm,
    access_token_expire_minutes,
    ROLE_ADMIN,
    ROLE_COMPANY,
)
from ngo_portal.database import get_db
from ngo_portal import approval
from ngo_portal.exceptions import AccountNotApprovedError, AuthenticationError, AuthorizationError
from ngo_portal.models.user_model import User

logger = logging.getLogger(__name__)

# auto_error is off so a missing header becomes a 401 from our own handler
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token carrying the account id and role."""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=access_token_expire_minutes))
    to_encode = {"sub": str(user.id), "role": user.role, "exp": expire}
    return jwt.encode(to_encode, jwt_secret_key, algorithm=jwt_algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, jwt_secret_key, algorithms=[jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError:
        raise AuthenticationError("Invalid token")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a stored account that may use the system."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token")

    user = resolve_token_user(db, credentials.credentials)
    # a token outlives role changes, so the approval gate is checked on every request
    if not approval.can_use_account(user):
        state = approval.read_state(user)
        logger.warning("Blocked unapproved %s %s (status=%s)", user.role, user.id, state.status.value)
        raise AccountNotApprovedError(state.status.value, state.reason)
    return user


def resolve_token_user(db: Session, token: str) -> User:
    """Decode a token and load the account it names."""
    payload = decode_token(token)
    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token payload")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthenticationError("Account no longer exists")
    return user


def authorize(identity: User, required_roles: Iterable[str]) -> User:
    """Role gate: let the identity through only when its role is in the set."""
    roles = set(required_roles)
    if identity.role not in roles:
        logger.warning("Denied %s (role=%s), requires one of %s", identity.id, identity.role, sorted(roles))
        if roles == {ROLE_ADMIN}:
            raise AuthorizationError("Admin access only")
        raise AuthorizationError(f"Access denied. Requires role: {', '.join(sorted(roles))}")
    return identity


def require_roles(*roles: str):
    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        return authorize(current_user, roles)

    return dependency


require_admin = require_roles(ROLE_ADMIN)
require_company = require_roles(ROLE_COMPANY)
require_admin_or_company = require_roles(ROLE_ADMIN, ROLE_COMPANY)
