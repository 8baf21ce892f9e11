"""DJ login/logout (shared credentials)."""
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel

from barjukebox.api.state import AppState, get_state

router = APIRouter()


class LoginBody(BaseModel):
    username: str
    password: str


@router.post("/login")
def login(body: LoginBody, state: AppState = Depends(get_state)):
    """Return a session token to send as X-DJ-Token on DJ routes."""
    token = state.gate.login(body.username, body.password)
    if token is None:
        raise HTTPException(status_code=401, detail="Invalid username or password.")
    return {"token": token}


@router.post("/logout")
def logout(
    x_dj_token: Optional[str] = Header(None),
    state: AppState = Depends(get_state),
):
    state.gate.logout(x_dj_token)
    return {"ok": True}


@router.get("/session")
def session(
    x_dj_token: Optional[str] = Header(None),
    state: AppState = Depends(get_state),
):
    return {"logged_in": state.gate.is_authenticated(x_dj_token)}
