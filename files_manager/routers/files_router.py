from typing import List, Optional
from fastapi import APIRouter, Depends, Response
import logging

from ..application.services.file_service import FileService
from ..dependencies import get_current_user_id, get_optional_user_id, get_file_service
from ..schemas.files import FileCreate, FileResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["Files"])


@router.post("", response_model=FileResponse, status_code=201)
def post_upload(
    payload: FileCreate,
    current_user: int = Depends(get_current_user_id),
    file_service: FileService = Depends(get_file_service),
):
    node = file_service.upload(
        current_user,
        name=payload.name,
        type=payload.type,
        parent_id=payload.parentId,
        is_public=payload.isPublic,
        data=payload.data,
    )
    return node.to_response()


@router.get("", response_model=List[FileResponse])
def get_index(
    parentId: Optional[str] = "0",
    page: Optional[str] = "0",
    current_user: int = Depends(get_current_user_id),
    file_service: FileService = Depends(get_file_service),
):
    nodes = file_service.list_children(current_user, parent_id=parentId, page=page)
    return [n.to_response() for n in nodes]


@router.get("/{file_id}", response_model=FileResponse)
def get_show(
    file_id: str,
    current_user: int = Depends(get_current_user_id),
    file_service: FileService = Depends(get_file_service),
):
    return file_service.get_for_owner(current_user, file_id).to_response()


@router.put("/{file_id}/publish", response_model=FileResponse)
def put_publish(
    file_id: str,
    current_user: int = Depends(get_current_user_id),
    file_service: FileService = Depends(get_file_service),
):
    node = file_service.set_visibility(current_user, file_id, True)
    logger.info(f"File {node.id} published by user {current_user}")
    return node.to_response()


@router.put("/{file_id}/unpublish", response_model=FileResponse)
def put_unpublish(
    file_id: str,
    current_user: int = Depends(get_current_user_id),
    file_service: FileService = Depends(get_file_service),
):
    node = file_service.set_visibility(current_user, file_id, False)
    logger.info(f"File {node.id} unpublished by user {current_user}")
    return node.to_response()


@router.get("/{file_id}/data")
def get_file_data(
    file_id: str,
    size: Optional[int] = None,
    current_user: Optional[int] = Depends(get_optional_user_id),
    file_service: FileService = Depends(get_file_service),
):
    content, mime_type = file_service.serve(current_user, file_id, width=size)
    return Response(content=content, media_type=mime_type)
