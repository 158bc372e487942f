"""
Deliverable API endpoints.

Upload of the demand's audio file, comments, and authorized streaming
downloads. Files live in the configured storage backend under
``{demand_id}/{safe_name}``.
"""
import logging
import uuid
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from starlette.responses import StreamingResponse
from sqlalchemy.orm import Session

from tracker.db.database import get_db
from tracker.db import schemas
from tracker.db.repositories import demands as demand_repo
from tracker.api.deps import require_any_role
from tracker.api.permissions import (
    assigned_scope,
    can_download_deliverable,
    can_upload_deliverable,
    can_view_deliverable,
)
from tracker.audit import AuditAction, safe_log
from tracker.services.storage_service import (
    FileTooLargeError,
    StorageError,
    get_storage_service,
    is_audio_upload,
    safe_storage_file_name,
)
from tracker.utils.errors import get_error_message
from tracker.utils.workflow import STATUS_DONE, STATUS_IN_PRODUCTION

logger = logging.getLogger(__name__)

router = APIRouter(tags=["deliverables"])

UPLOADABLE_STATUSES = (STATUS_IN_PRODUCTION, STATUS_DONE)


def _get_demand_or_404(db: Session, demand_id: uuid.UUID, current_user):
    demand = demand_repo.get_demand(db, demand_id, assigned_to=assigned_scope(current_user))
    if not demand:
        raise HTTPException(status_code=404, detail="Demand not found")
    return demand


def _ensure_can_write(demand, current_user):
    if not can_upload_deliverable(demand, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    if demand.status not in UPLOADABLE_STATUSES:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Deliverables are only accepted once production has started")


def _content_disposition(file_name: str) -> str:
    ascii_name = file_name.encode("ascii", "ignore").decode("ascii").replace('"', "") or "download"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(file_name)}"


@router.get("/deliverables/", response_model=List[schemas.Deliverable])
def list_deliverables(
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    _user, current_user = user_context
    demands = demand_repo.get_demands(db, assigned_to=assigned_scope(current_user))
    visible_ids = [d.id for d in demands if can_view_deliverable(d, current_user)]
    rows = demand_repo.get_deliverables(db, visible_ids)
    return [rows[i] for i in visible_ids if i in rows]


@router.get("/demands/{demand_id}/deliverable", response_model=schemas.Deliverable)
def get_deliverable(
    demand_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    _user, current_user = user_context
    demand = _get_demand_or_404(db, demand_id, current_user)
    deliverable = demand_repo.get_deliverable(db, demand.id)
    if deliverable is None or not can_view_deliverable(demand, current_user):
        raise HTTPException(status_code=404, detail="Deliverable not found")
    return deliverable


@router.post("/demands/{demand_id}/deliverable/file", response_model=schemas.Deliverable)
def upload_deliverable_file(
    demand_id: uuid.UUID,
    file: UploadFile = File(...),
    comments: Optional[str] = Form(default=None),
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    user, current_user = user_context
    demand = _get_demand_or_404(db, demand_id, current_user)
    _ensure_can_write(demand, current_user)

    original_name = file.filename or ""
    if not is_audio_upload(original_name, file.content_type):
        raise HTTPException(status_code=422, detail="Only audio files are accepted")

    storage = get_storage_service()
    if storage.max_bytes and file.size is not None and file.size > storage.max_bytes:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File too large")

    key = f"{demand.id}/{safe_storage_file_name(original_name)}"
    try:
        size = storage.save(key, file.file)
    except FileTooLargeError:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File too large")
    except StorageError as exc:
        safe_log(
            db,
            action=AuditAction.DELIVERABLE_UPLOAD,
            status="failure",
            target_type="demand",
            target_id=demand.id,
            actor_user_id=user.id,
            reason=get_error_message(exc),
        )
        raise HTTPException(status_code=500, detail="Could not store file")

    previous = demand_repo.get_deliverable(db, demand.id)
    previous_key = previous.storage_path if previous is not None else None

    extra = {}
    if comments is not None:
        extra["comments"] = comments.strip() or None
    deliverable = demand_repo.upsert_deliverable_file(
        db,
        demand.id,
        storage_path=key,
        file_name=original_name or key.rsplit("/", 1)[-1],
        content_type=file.content_type,
        size_bytes=size,
        uploaded_by=user.id,
        **extra,
    )
    if previous_key and previous_key != key:
        try:
            storage.delete(previous_key)
        except (StorageError, OSError) as exc:
            logger.warning("deliverable_cleanup_failed: demand_id=%s key=%s error=%s", demand.id, previous_key, exc)
    logger.info("deliverable_uploaded: demand_id=%s key=%s size=%s by=%s", demand.id, key, size, user.email)
    safe_log(
        db,
        action=AuditAction.DELIVERABLE_UPLOAD,
        target_type="demand",
        target_id=demand.id,
        actor_user_id=user.id,
        metadata={"file_name": deliverable.file_name, "size_bytes": size},
    )
    return deliverable


@router.put("/demands/{demand_id}/deliverable/comments", response_model=schemas.Deliverable)
def save_deliverable_comments(
    demand_id: uuid.UUID,
    payload: schemas.DeliverableCommentsUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    user, current_user = user_context
    demand = _get_demand_or_404(db, demand_id, current_user)
    _ensure_can_write(demand, current_user)
    deliverable = demand_repo.upsert_deliverable_comments(db, demand.id, comments=payload.comments, user_id=user.id)
    safe_log(
        db,
        action=AuditAction.DELIVERABLE_COMMENT,
        target_type="demand",
        target_id=demand.id,
        actor_user_id=user.id,
    )
    return deliverable


@router.get("/demands/{demand_id}/deliverable/download")
def download_deliverable(
    demand_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    _user, current_user = user_context
    if not can_download_deliverable(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    demand = _get_demand_or_404(db, demand_id, current_user)
    deliverable = demand_repo.get_deliverable(db, demand.id)
    if deliverable is None or not deliverable.has_file or not can_view_deliverable(demand, current_user):
        raise HTTPException(status_code=404, detail="Deliverable file not found")
    try:
        body = get_storage_service().open(deliverable.storage_path)
    except (FileNotFoundError, StorageError):
        logger.warning("deliverable_missing_in_storage: demand_id=%s key=%s", demand.id, deliverable.storage_path)
        raise HTTPException(status_code=404, detail="Deliverable file not found")
    headers = {"Content-Disposition": _content_disposition(deliverable.file_name)}
    if deliverable.size_bytes is not None:
        headers["Content-Length"] = str(deliverable.size_bytes)
    return StreamingResponse(
        body,
        media_type=deliverable.content_type or "application/octet-stream",
        headers=headers,
    )
