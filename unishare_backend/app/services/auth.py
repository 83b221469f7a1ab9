import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import create_access_token, decode_access_token, hash_password, verify_password
from app.models.user import User, UserRole, UserStatus
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from app.schemas.user import UserOut
from app.services.statistics import increment_active_users
from app.services.users import find_by_email, normalize_email

logger = logging.getLogger(__name__)

_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)
_BEARER = {"WWW-Authenticate": "Bearer"}


def register_user(db: Session, payload: RegisterRequest) -> User:
    if find_by_email(db, payload.email):
        raise HTTPException(status_code=409, detail="Email already registered.")
    user = User(
        email=normalize_email(payload.email),
        hashed_password=hash_password(payload.password),
        full_name=payload.full_name,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Email already registered.")
    db.refresh(user)
    increment_active_users(db, 1)
    logger.info("Registered user %s", user.id)
    return user


def login_user(db: Session, payload: LoginRequest) -> TokenResponse:
    user = find_by_email(db, payload.email)
    if user is None:
        logger.warning("Login failed: unknown email")
        raise HTTPException(status_code=401, detail="Invalid email or password.")
    if user.status == UserStatus.BLOCKED:
        logger.warning("Login refused for blocked user %s", user.id)
        raise HTTPException(status_code=401, detail="Account is blocked. Contact an administrator.")
    if not verify_password(payload.password, user.hashed_password):
        logger.warning("Login failed for user %s: wrong password", user.id)
        raise HTTPException(status_code=401, detail="Invalid email or password.")
    return TokenResponse(
        access_token=create_access_token(user.id, user.email, user.role),
        user=UserOut.model_validate(user),
    )


def get_current_user(
    token: str | None = Depends(_oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated.", headers=_BEARER)
    claims = decode_access_token(token)
    if claims is None:
        logger.warning("Rejected invalid or expired token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.", headers=_BEARER)
    user = db.get(User, claims["sub"])
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found.", headers=_BEARER)
    if user.status == UserStatus.BLOCKED:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is blocked.", headers=_BEARER)
    return user


def require_roles(*roles: UserRole):
    """Build a dependency that admits only users holding one of ``roles``.

    The role is read from the stored user rather than the token claim so that
    role changes take effect without re-login.
    """
    allowed = {role.value for role in roles}

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role for this action.")
        return current_user

    return dependency


require_staff = require_roles(UserRole.MODERATOR, UserRole.ADMIN)
require_admin = require_roles(UserRole.ADMIN)
