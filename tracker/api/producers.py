"""Producer lookup used to fill assignment pickers."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tracker.db.database import get_db
from tracker.db import schemas
from tracker.db.repositories import users as user_repo
from tracker.api.deps import require_any_role

router = APIRouter(prefix="/producers", tags=["producers"])


@router.get("/", response_model=List[schemas.Producer])
def list_producers(
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    return [schemas.Producer(id=u.id, display_name=u.display_name) for u in user_repo.list_producers(db)]
