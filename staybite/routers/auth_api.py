from fastapi import APIRouter, Depends, Request, Response

from ..config import settings
from ..context import AppContext, get_context, require_user
from ..limiter import limiter
from ..schemas import LoginIn, ProfileUpdateIn, SessionOut, SignUpIn, UserOut
from ..security import clear_session, set_session
from ..services.session import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=SessionOut, status_code=201)
@limiter.limit(settings.RATE_LIMIT_AUTH)
def api_signup(request: Request, payload: SignUpIn, response: Response, ctx: AppContext = Depends(get_context)):
    user, token = AuthService(ctx.db, ctx.events).sign_up(payload.email, payload.password, payload.name, payload.is_host)
    set_session(response, token)
    return SessionOut(user=UserOut.model_validate(user), token=token)


@router.post("/login", response_model=SessionOut)
@limiter.limit(settings.RATE_LIMIT_AUTH)
def api_login(request: Request, payload: LoginIn, response: Response, ctx: AppContext = Depends(get_context)):
    user, token = AuthService(ctx.db, ctx.events).sign_in(payload.email, payload.password)
    set_session(response, token)
    return SessionOut(user=UserOut.model_validate(user), token=token)


@router.post("/logout")
def api_logout(response: Response, ctx: AppContext = Depends(get_context)):
    AuthService(ctx.db, ctx.events).sign_out(ctx)
    clear_session(response)
    return {"ok": True}


@router.post("/refresh", response_model=SessionOut)
@limiter.limit(settings.RATE_LIMIT_AUTH)
def api_refresh(request: Request, response: Response, ctx: AppContext = Depends(get_context)):
    token = AuthService(ctx.db, ctx.events).refresh(ctx.user)
    set_session(response, token)
    return SessionOut(user=UserOut.model_validate(ctx.user), token=token)


@router.get("/me", response_model=UserOut)
def api_me(ctx: AppContext = Depends(get_context)):
    return require_user(ctx)


@router.patch("/me", response_model=UserOut)
def api_update_profile(payload: ProfileUpdateIn, ctx: AppContext = Depends(get_context)):
    return AuthService(ctx.db, ctx.events).update_metadata(
        require_user(ctx), name=payload.name, avatar_url=payload.avatar_url, is_host=payload.is_host
    )
