"""
api/routes/folders.py -- Folder REST endpoints.

Routes:
  GET    /api/folders       -- caller's folders with flashcard counts
  POST   /api/folders       -- create a folder
  PUT    /api/folders/{id}  -- rename a folder
  DELETE /api/folders/{id}  -- delete a folder and all of its flashcards

Every route requires a session token. Unknown ids are 404; folders owned by
someone else are 403.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_study_service
from api.models import FolderListResponse, FolderOut, FolderResponse, FolderWrite, MessageResponse
from auth.dependencies import get_current_user_id
from study.service import StudyService

router = APIRouter()


@router.get("/folders", response_model=FolderListResponse)
def list_folders(
    user_id: int = Depends(get_current_user_id),
    study: StudyService = Depends(get_study_service),
) -> FolderListResponse:
    """Newest first."""
    folders = study.list_folders(user_id)
    return FolderListResponse(folders=[FolderOut.from_folder(f) for f in folders])


@router.post("/folders", response_model=FolderResponse, status_code=201)
def create_folder(
    body: FolderWrite,
    user_id: int = Depends(get_current_user_id),
    study: StudyService = Depends(get_study_service),
) -> FolderResponse:
    folder = study.create_folder(user_id, body.name)
    return FolderResponse(folder=FolderOut.from_folder(folder))


@router.put("/folders/{folder_id}", response_model=FolderResponse)
def update_folder(
    folder_id: int,
    body: FolderWrite,
    user_id: int = Depends(get_current_user_id),
    study: StudyService = Depends(get_study_service),
) -> FolderResponse:
    folder = study.update_folder(user_id, folder_id, body.name)
    return FolderResponse(folder=FolderOut.from_folder(folder))


@router.delete("/folders/{folder_id}", response_model=MessageResponse)
def delete_folder(
    folder_id: int,
    user_id: int = Depends(get_current_user_id),
    study: StudyService = Depends(get_study_service),
) -> MessageResponse:
    """Delete the folder; its flashcards go with it in the same transaction."""
    study.delete_folder(user_id, folder_id)
    return MessageResponse(message="Folder deleted successfully")
