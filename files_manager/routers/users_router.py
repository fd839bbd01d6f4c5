from typing import Optional
from fastapi import APIRouter, Depends, Header, Response
import logging

from ..application.services.auth_service import AuthService
from ..application.services.user_service import UserService
from ..dependencies import get_auth_service, get_user_service, get_current_user_id
from ..schemas.users import UserCreate, UserResponse, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


@router.post("/users", response_model=UserResponse, status_code=201)
def post_new(
    payload: UserCreate,
    user_service: UserService = Depends(get_user_service),
):
    user = user_service.register(payload.email, payload.password)
    logger.info(f"Registered user {user.id}")
    return UserResponse(id=user.id, email=user.email)


@router.get("/users/me", response_model=UserResponse)
def get_me(
    current_user: int = Depends(get_current_user_id),
    user_service: UserService = Depends(get_user_service),
):
    user = user_service.me(current_user)
    return UserResponse(id=user.id, email=user.email)


@router.get("/connect", response_model=TokenResponse)
def get_connect(
    authorization: Optional[str] = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
):
    return TokenResponse(token=auth_service.connect(authorization))


@router.get("/disconnect", status_code=204)
def get_disconnect(
    x_token: Optional[str] = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.disconnect(x_token)
    return Response(status_code=204)
