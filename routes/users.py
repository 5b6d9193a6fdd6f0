from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from database import get_session
from schemas import UserRegister, UserLogin
from middleware.auth import extract_bearer_token
from services import auth

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    session: Session = Depends(get_session)
) -> dict:
    """
    Register a new user

    The caller logs in separately to obtain a token.
    """
    user = auth.register(session, user_data)
    return {"success": True, "user": user}


@router.post("/login")
def login(
    credentials: UserLogin,
    session: Session = Depends(get_session)
) -> dict:
    """Exchange email and password for a bearer token"""
    token, user = auth.login(session, credentials)
    return {"success": True, "token": token, "user": user}


@router.get("/me")
def me(
    token: str = Depends(extract_bearer_token),
    session: Session = Depends(get_session)
) -> dict:
    """Profile of the user owning the bearer token"""
    return {"success": True, "user": auth.get_current_user(session, token)}
