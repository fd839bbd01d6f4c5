from fastapi import APIRouter, Depends, Request
from sqlmodel import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import logging

from ..database import get_session
from ..infrastructure.persistence.sqlalchemy.repositories.file_repository_sql import SqlFileRepository
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..schemas.users import StatusResponse, StatsResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["App"])


@router.get("/status", response_model=StatusResponse)
def get_status(request: Request, session: Session = Depends(get_session)):
    try:
        session.exec(text("SELECT 1"))
        db_alive = True
    except SQLAlchemyError as e:
        logger.warning(f"Metadata store is not reachable: {e}")
        db_alive = False
    return StatusResponse(redis=request.app.state.session_store.is_alive(), db=db_alive)


@router.get("/stats", response_model=StatsResponse)
def get_stats(session: Session = Depends(get_session)):
    return StatsResponse(
        users=SqlUserRepository(session).count(),
        files=SqlFileRepository(session).count(),
    )
