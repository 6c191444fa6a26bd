# backend/routes/auth.py
import logging
from typing import Optional
from urllib.parse import quote, urljoin

from fastapi import APIRouter, Depends, HTTPException, status, Request, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.staff import Staff
from models.auth_session import AuthSession
from schemas import user as schemas
from schemas.common import MessageResponse
from utils.audit import write_log, client_ip
from utils.google_oauth import google_client, GoogleOAuthError
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import (
    open_session, revoke_session, create_magic_link_token, create_access_token, decode_token,
    get_current_session, get_current_user, MAGIC_LINK_PURPOSE, OAUTH_STATE_PURPOSE,
)

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger(__name__)


def _token_response(token: str, session: AuthSession) -> dict:
    return {"access_token": token, "token_type": "bearer", "expires_at": session.expires_at.isoformat()}


def _find_staff(db: Session, email: str) -> Optional[Staff]:
    return db.query(Staff).filter(func.lower(Staff.email) == email.strip().lower()).first()


# Register with email and password
@router.post("/signup", response_model=schemas.MeResponse, status_code=201)
def signup(payload: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    normalized_email = payload.email.strip().lower()

    # Existing records (including password-less ones) set a password via PUT /auth/password once signed in
    if _find_staff(db, normalized_email):
        write_log(db, user_id=None, action="SIGNUP", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": normalized_email, "reason": "Email exists"})
        raise HTTPException(status_code=400, detail="Email already registered")

    staff = Staff(
        name=payload.name.strip(),
        email=normalized_email,
        position=payload.position,
        department=payload.department,
        role="staff",
        password_hash=get_password_hash(payload.password),
    )
    db.add(staff)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email already registered")
    db.refresh(staff)

    write_log(db, user_id=staff.id, action="SIGNUP", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": staff.email})

    return schemas.MeResponse.model_validate({**schemas.StaffOut.model_validate(staff).model_dump(), "is_admin": staff.is_admin})


# Authenticate with email and password and open a session
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    staff = _find_staff(db, payload.email)

    # Validate credentials and log failure on error
    if not staff or not verify_password(payload.password, staff.password_hash):
        write_log(db, user_id=(staff.id if staff else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token, session = open_session(db, staff, provider="password")

    write_log(db, user_id=staff.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": staff.email})

    return _token_response(token, session)


# Request a passwordless sign-in link
@router.post("/magic-link", response_model=MessageResponse, status_code=202)
def request_magic_link(payload: schemas.MagicLinkRequest, request: Request, db: Session = Depends(get_db)):
    staff = _find_staff(db, payload.email)

    # Same answer for unknown addresses
    if staff:
        token = create_magic_link_token(staff.email)
        link = f"{urljoin(settings.FRONTEND_URL, '/auth/callback')}?magic_token={quote(token)}"
        # No mail transport is wired in; the link goes to the application log
        logger.info("Magic link issued for %s: %s", staff.email, link)
        write_log(db, user_id=staff.id, action="MAGIC_LINK", resource="auth",
                  status="SUCCESS", ip=client_ip(request), meta={"email": staff.email})

    return {"message": "If the address belongs to a staff member, a sign-in link has been sent"}


# Trade a magic-link token for a session
@router.post("/magic-link/verify", response_model=schemas.Token)
def verify_magic_link(payload: schemas.MagicLinkVerify, request: Request, db: Session = Depends(get_db)):
    claims = decode_token(payload.token, purpose=MAGIC_LINK_PURPOSE)
    staff = _find_staff(db, claims["sub"]) if claims and claims.get("sub") and claims.get("jti") else None
    if staff is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired link")

    # The link id becomes the session id, so the unique sid makes each link single-use
    try:
        token, session = open_session(db, staff, provider="magic_link", sid=claims["jti"])
    except IntegrityError:
        db.rollback()
        write_log(db, user_id=staff.id, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": staff.email, "provider": "magic_link", "reason": "reused"})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired link")
    write_log(db, user_id=staff.id, action="LOGIN", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": staff.email, "provider": "magic_link"})
    return _token_response(token, session)


# Start Google sign-in
@router.get("/google/login")
def google_login(next: str = Query("/", description="Frontend path to return to")):
    if not google_client.configured:
        raise HTTPException(status_code=503, detail="Google sign-in is not configured")

    # Only relative paths are accepted as return targets
    if not next.startswith("/") or next.startswith("//"):
        next = "/"
    state = create_access_token({"purpose": OAUTH_STATE_PURPOSE, "next": next})
    return RedirectResponse(google_client.authorization_url(state), status_code=302)


def _error_redirect(error: str) -> RedirectResponse:
    return RedirectResponse(
        f"{urljoin(settings.FRONTEND_URL, '/auth/auth-code-error')}?error={quote(error)}",
        status_code=302,
    )


def _google_sign_in(db: Session, identity: dict, ip: Optional[str]) -> str:
    staff = _find_staff(db, identity["email"])
    if staff is None:
        staff = Staff(name=identity["name"], email=identity["email"], avatar=identity.get("picture"), role="staff")
        db.add(staff)
        db.commit()
        db.refresh(staff)

    token, _ = open_session(db, staff, provider="google")
    write_log(db, user_id=staff.id, action="LOGIN", resource="auth", status="SUCCESS",
              ip=ip, meta={"email": staff.email, "provider": "google"})
    return token


# Google redirects here with an authorization code
@router.get("/callback")
async def oauth_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    if not google_client.configured:
        raise HTTPException(status_code=503, detail="Google sign-in is not configured")
    if error:
        return _error_redirect(error)
    if not code:
        return _error_redirect("no_code")

    state_claims = decode_token(state or "", purpose=OAUTH_STATE_PURPOSE)
    if state_claims is None:
        return _error_redirect("invalid_state")

    ip = client_ip(request)
    try:
        identity = await google_client.verified_identity(code)
    except GoogleOAuthError as e:
        await run_in_threadpool(
            write_log, db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
            ip=ip, meta={"provider": "google", "reason": str(e)},
        )
        return _error_redirect(str(e))

    # Session calls block, so they run off the event loop
    token = await run_in_threadpool(_google_sign_in, db, identity, ip)

    next_path = state_claims.get("next") or "/"
    return RedirectResponse(f"{urljoin(settings.FRONTEND_URL, next_path)}#access_token={quote(token)}", status_code=302)


# Rotate the current session: the old token stops working
@router.post("/refresh", response_model=schemas.Token)
def refresh(session: AuthSession = Depends(get_current_session), db: Session = Depends(get_db)):
    staff = session.staff
    revoke_session(db, session)
    token, new_session = open_session(db, staff, provider=session.provider)
    return _token_response(token, new_session)


# Revoke the current session
@router.post("/logout", response_model=MessageResponse)
def logout(request: Request, session: AuthSession = Depends(get_current_session), db: Session = Depends(get_db)):
    staff_id = session.staff_id
    revoke_session(db, session)
    write_log(db, user_id=staff_id, action="LOGOUT", resource="auth", status="SUCCESS", ip=client_ip(request))
    return {"message": "Signed out"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.MeResponse)
def me(current_user: Staff = Depends(get_current_user)):
    return schemas.MeResponse.model_validate(
        {**schemas.StaffOut.model_validate(current_user).model_dump(), "is_admin": current_user.is_admin}
    )


# Change the caller's password
@router.put("/password", response_model=MessageResponse)
def change_password(
    payload: schemas.PasswordChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(get_current_user),
):
    if current_user.password_hash and not verify_password(payload.current_password or "", current_user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    current_user.password_hash = get_password_hash(payload.new_password)
    db.commit()

    write_log(db, user_id=current_user.id, action="PASSWORD_CHANGE", resource="auth",
              status="SUCCESS", ip=client_ip(request))
    return {"message": "Password updated"}
