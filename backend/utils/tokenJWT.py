# utils/tokenJWT.py
import uuid
from datetime import timedelta
from typing import Optional, Tuple

from jose import jwt, JWTError
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.staff import Staff
from models.auth_session import AuthSession
from utils.phases import utcnow

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

# Authorization schemes; the optional one lets anonymous callers through
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

MAGIC_LINK_PURPOSE = "magic_link"
OAUTH_STATE_PURPOSE = "oauth_state"


# Generate a new signed JWT
def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str, purpose: Optional[str] = None) -> Optional[dict]:
    """Return the payload of a valid token, or None when it is invalid, expired or has another purpose."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("purpose") != purpose:
        return None
    return payload


# Open a server-side session and issue the bearer token that refers to it
def open_session(db: Session, staff: Staff, provider: str = "password",
                 sid: Optional[str] = None) -> Tuple[str, AuthSession]:
    expires_at = utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    session = AuthSession(
        sid=sid or uuid.uuid4().hex,
        staff_id=staff.id,
        provider=provider,
        expires_at=expires_at,
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    token = create_access_token(
        data={"sub": staff.email, "sid": session.sid, "role": staff.role},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return token, session


def revoke_session(db: Session, session: AuthSession) -> None:
    if session.revoked_at is None:
        session.revoked_at = utcnow()
        db.commit()


def create_magic_link_token(email: str) -> str:
    return create_access_token(
        data={"sub": email, "purpose": MAGIC_LINK_PURPOSE, "jti": uuid.uuid4().hex},
        expires_delta=timedelta(minutes=settings.MAGIC_LINK_EXPIRE_MINUTES),
    )


def _load_session(token: str, db: Session) -> Optional[AuthSession]:
    payload = decode_token(token)
    if payload is None:
        return None
    sid = payload.get("sid")
    email = payload.get("sub")
    if not sid or not email:
        return None

    session = db.query(AuthSession).filter(AuthSession.sid == sid).first()
    if session is None or session.revoked_at is not None or session.expires_at <= utcnow():
        return None
    # Role is always read from the staff row, never trusted from the token
    if session.staff is None or session.staff.email != email:
        return None
    return session


# Retrieve the active session of the caller
def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthSession:
    session = _load_session(credentials.credentials, db)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


# Retrieve the currently authenticated staff member
def get_current_user(session: AuthSession = Depends(get_current_session)) -> Staff:
    return session.staff


# Same as get_current_user, but anonymous callers get None instead of a 401
def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[Staff]:
    if credentials is None:
        return None
    session = _load_session(credentials.credentials, db)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session.staff


# Dependency factory for Role-Based Access Control
def role_required(*allowed_roles):
    def _checker(current_user: Staff = Depends(get_current_user)):
        if allowed_roles and (current_user.role or "").lower() not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin access required"
            )
        return current_user
    return _checker


require_admin = role_required("admin")
