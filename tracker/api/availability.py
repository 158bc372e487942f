"""
Producer availability endpoints.

Producers publish free slots; requesters, executives and admins read them
grouped by producer and date. Demand creation never consults these slots.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tracker.db.database import get_db
from tracker.db import schemas
from tracker.db.repositories import availability as availability_repo
from tracker.api.deps import require_capability
from tracker.audit import AuditAction, safe_log
from tracker.utils.feature_flags import availability_enabled
from tracker.utils.role_permissions import CAP_MANAGE_OWN_AVAILABILITY, CAP_VIEW_ALL_AVAILABILITY


def _feature_gate():
    if not availability_enabled():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Availability is disabled")


router = APIRouter(prefix="/availability", tags=["availability"], dependencies=[Depends(_feature_gate)])


def _row(slot) -> schemas.AvailabilityRow:
    return schemas.AvailabilityRow(
        id=slot.id,
        producer_id=slot.user_id,
        producer_name=slot.producer_name,
        date=slot.date,
        slot_start=slot.slot_start,
        slot_end=slot.slot_end,
    )


@router.get("/me", response_model=List[schemas.AvailabilitySlot])
def list_my_slots(
    db: Session = Depends(get_db),
    user_context=Depends(require_capability(CAP_MANAGE_OWN_AVAILABILITY)),
):
    user, _ctx = user_context
    return availability_repo.list_for_user(db, user.id)


@router.post("/me", response_model=schemas.AvailabilitySlot, status_code=status.HTTP_201_CREATED)
def add_my_slot(
    payload: schemas.AvailabilitySlotCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_capability(CAP_MANAGE_OWN_AVAILABILITY)),
):
    user, _ctx = user_context
    if availability_repo.find_slot(db, user.id, payload):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Slot already registered")
    slot = availability_repo.create_slot(db, user.id, payload)
    safe_log(
        db,
        action=AuditAction.AVAILABILITY_CREATE,
        target_type="availability",
        target_id=slot.id,
        actor_user_id=user.id,
        metadata={"date": slot.date.isoformat()},
    )
    return slot


@router.delete("/me/{slot_id}")
def delete_my_slot(
    slot_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_capability(CAP_MANAGE_OWN_AVAILABILITY)),
):
    user, _ctx = user_context
    if not availability_repo.delete_slot(db, slot_id, user_id=user.id):
        raise HTTPException(status_code=404, detail="Slot not found")
    safe_log(
        db,
        action=AuditAction.AVAILABILITY_DELETE,
        target_type="availability",
        target_id=slot_id,
        actor_user_id=user.id,
    )
    return {"message": "Slot deleted successfully"}


@router.get("/", response_model=List[schemas.AvailabilityRow])
def list_all_slots(
    producer_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_capability(CAP_VIEW_ALL_AVAILABILITY)),
):
    return [_row(slot) for slot in availability_repo.list_all(db, producer_id=producer_id)]


@router.get("/grouped", response_model=schemas.GroupedAvailability)
def list_grouped_slots(
    producer_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_capability(CAP_VIEW_ALL_AVAILABILITY)),
):
    rows = availability_repo.list_all(db, producer_id=producer_id)
    return {"producers": availability_repo.group_by_producer(rows)}
