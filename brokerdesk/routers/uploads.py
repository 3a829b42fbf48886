# brokerdesk/routers/uploads.py
from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..db import get_db
from ..errors import InternalError
from ..schemas import ProfileImageOut
from ..services import auth_service, uploads

router = APIRouter(tags=["uploads"])

# mounted at the root so stored references ("/uploads/<name>") resolve as-is
files_router = APIRouter(tags=["uploads"])


@router.post("/upload/profile-photo", response_model=ProfileImageOut)
def upload_profile_photo(
    profile_photo: UploadFile = File(...),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    ref, path = uploads.save_profile_photo(profile_photo.file, profile_photo.filename or "")
    try:
        auth_service.update_profile_image(db, p.user_id, ref)
    except InternalError:
        uploads.remove_upload(path)
        raise
    return ProfileImageOut(profile_image=ref)


@files_router.get(uploads.PUBLIC_PREFIX + "{filename}")
def serve_upload(filename: str):
    return FileResponse(uploads.resolve_upload(filename))
