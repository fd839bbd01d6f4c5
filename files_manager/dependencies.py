from typing import Optional

from fastapi import Depends, Header, Request
from sqlmodel import Session

from .application.services.auth_service import AuthService
from .application.services.file_service import FileService
from .application.services.user_service import UserService
from .database import get_session
from .exceptions import Unauthorized
from .infrastructure.persistence.sqlalchemy.repositories.file_repository_sql import SqlFileRepository
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository


def get_auth_service(request: Request, session: Session = Depends(get_session)) -> AuthService:
    return AuthService(
        session_store=request.app.state.session_store,
        user_repo=SqlUserRepository(session),
        session_ttl=request.app.state.settings.SESSION_TTL_SECONDS,
    )


def get_user_service(session: Session = Depends(get_session)) -> UserService:
    return UserService(user_repo=SqlUserRepository(session))


def get_file_service(request: Request, session: Session = Depends(get_session)) -> FileService:
    return FileService(
        file_repo=SqlFileRepository(session),
        blob_store=request.app.state.blob_store,
        job_queue=request.app.state.job_queue,
        page_size=request.app.state.settings.PAGE_SIZE,
    )


def get_current_user_id(
    x_token: Optional[str] = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> int:
    return auth_service.authenticate(x_token)


def get_optional_user_id(
    x_token: Optional[str] = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[int]:
    if not x_token:
        return None
    try:
        return auth_service.authenticate(x_token)
    except Unauthorized:
        # Anonymous readers still get public files
        return None
