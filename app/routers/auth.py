from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from app.models.user import SessionState
from app.routers.deps import get_session_context, raise_for_form, store_session_cookie
from app.services.forms import LoginFormController, RegisterFormController
from app.services.session import SessionContext

router = APIRouter()


class LoginIn(BaseModel):
    email: str = ""
    password: str = ""


class RegisterIn(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""


class AuthOut(BaseModel):
    session: SessionState
    redirect: str = "/"


class LogoutOut(BaseModel):
    success: bool


@router.post("/register", response_model=AuthOut)
def register(data: RegisterIn, response: Response, ctx: SessionContext = Depends(get_session_context)):
    result = raise_for_form(RegisterFormController(ctx).submit(data.model_dump()))
    store_session_cookie(response, ctx)
    return AuthOut(session=result.data, redirect=result.redirect)


@router.post("/login", response_model=AuthOut)
def login(data: LoginIn, response: Response, ctx: SessionContext = Depends(get_session_context)):
    result = raise_for_form(LoginFormController(ctx).submit(data.model_dump()))
    store_session_cookie(response, ctx)
    return AuthOut(session=result.data, redirect=result.redirect)


@router.post("/logout", response_model=LogoutOut)
def logout(response: Response, ctx: SessionContext = Depends(get_session_context)):
    success = ctx.logout()
    if success:
        store_session_cookie(response, ctx)
    return LogoutOut(success=success)


@router.get("/me", response_model=SessionState)
def me(ctx: SessionContext = Depends(get_session_context)):
    return ctx.resolve()
