"""Auth API — registration, login, and the caller's own account.

Learn: Routes for the account lifecycle:
- POST /auth/register → create an account, returns it with a session token
- POST /auth/login → email/password → session token
- GET /auth/me → current account info
- DELETE /auth/me → delete the account and everything it owns
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.auth.dependencies import get_current_identity
from coursehub.auth.identity import CurrentIdentity
from coursehub.db.engine import get_db
from coursehub.errors import CoursehubError, NotFound, Unauthorized, to_http_exception
from coursehub.schemas.user import LoginRequest, RegisterRequest, SessionResponse, UserRead
from coursehub.services.account_lifecycle import AccountLifecycle
from coursehub.services.credential_store import CredentialStore
from coursehub.services.session_issuer import SessionIssuer

router = APIRouter(prefix="/auth")


def _session_response(user, token: str) -> SessionResponse:
    return SessionResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        token=token,
    )


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=SessionResponse, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create a new account and sign it in."""
    try:
        user = await CredentialStore(db).add(
            name=body.name,
            email=body.email,
            password=body.password,
            role=body.role,
        )
    except CoursehubError as e:
        raise to_http_exception(e)
    return _session_response(user, SessionIssuer(db).token_for(user))


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=SessionResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login with email and password → session token."""
    try:
        user, token = await SessionIssuer(db).issue_session(body.email, body.password)
    except CoursehubError as e:
        raise to_http_exception(e)
    return _session_response(user, token)


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated user's info."""
    try:
        user = await CredentialStore(db).get(identity.user_id)
    except CoursehubError as e:
        raise to_http_exception(e)
    if user is None:
        raise to_http_exception(Unauthorized("Account no longer exists"))
    return user


@router.delete("/me")
async def delete_me(
    identity: CurrentIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Delete the caller's account, their courses, and their enrollments."""
    try:
        await AccountLifecycle(db).delete_account(identity.user_id)
    except NotFound:
        raise to_http_exception(Unauthorized("Account no longer exists"))
    except CoursehubError as e:
        raise to_http_exception(e)
    return {"deleted": True}
