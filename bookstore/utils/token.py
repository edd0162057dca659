from jose import JWTError, jwt
from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session
from bookstore.config import settings
from bookstore.database import get_session
from bookstore.errors import Forbidden, Unauthenticated
from bookstore.models.user import User

# Tokens are issued by the identity provider; this service only verifies them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()

    expire = datetime.utcnow() + (
        expires_delta
        if expires_delta
        else timedelta(minutes=settings.access_token_expire_minutes)
    )

    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm
    )
    return encoded_jwt


def decode_access_token(token: str):
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
        return payload
    except JWTError:
        return None


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    session: Session = Depends(get_session)
) -> User:
    if not token:
        raise Unauthenticated("Not authenticated")

    payload = decode_access_token(token)

    if payload is None:
        raise Unauthenticated("Could not validate credentials")

    user_id = payload.get("user_id") or payload.get("sub")

    if user_id is None:
        raise Unauthenticated("Invalid token payload")

    try:
        user = session.get(User, int(user_id))
    except (TypeError, ValueError):
        raise Unauthenticated("Invalid token payload")

    if user is None:
        raise Unauthenticated("User not found")

    if not user.can_login:
        raise Forbidden("User account is disabled")

    return user
