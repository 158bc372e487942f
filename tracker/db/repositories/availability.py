"""
Producer availability repository functions.

Slots are informational: nothing else in the tracker reads them to block work.
"""
from __future__ import annotations

import uuid
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from tracker.db import models, schemas


def list_for_user(db: Session, user_id: uuid.UUID) -> List[models.ProducerAvailability]:
    return (
        db.query(models.ProducerAvailability)
        .filter(models.ProducerAvailability.user_id == user_id)
        .order_by(models.ProducerAvailability.date, models.ProducerAvailability.slot_start)
        .all()
    )


def find_slot(db: Session, user_id: uuid.UUID, slot: schemas.AvailabilitySlotCreate) -> Optional[models.ProducerAvailability]:
    return (
        db.query(models.ProducerAvailability)
        .filter(
            models.ProducerAvailability.user_id == user_id,
            models.ProducerAvailability.date == slot.date,
            models.ProducerAvailability.slot_start == slot.slot_start,
            models.ProducerAvailability.slot_end == slot.slot_end,
        )
        .first()
    )


def create_slot(db: Session, user_id: uuid.UUID, slot: schemas.AvailabilitySlotCreate) -> models.ProducerAvailability:
    row = models.ProducerAvailability(
        user_id=user_id,
        date=slot.date,
        slot_start=slot.slot_start,
        slot_end=slot.slot_end,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def delete_slot(db: Session, slot_id: uuid.UUID, *, user_id: uuid.UUID) -> bool:
    """Delete a slot owned by ``user_id``; returns False when it is not theirs."""
    try:
        row = (
            db.query(models.ProducerAvailability)
            .filter(
                models.ProducerAvailability.id == slot_id,
                models.ProducerAvailability.user_id == user_id,
            )
            .first()
        )
        if not row:
            return False
        db.delete(row)
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        raise RuntimeError(f"Failed to delete availability slot {slot_id}: {str(e)}")


def list_all(db: Session, producer_id: Optional[uuid.UUID] = None) -> List[models.ProducerAvailability]:
    q = (
        db.query(models.ProducerAvailability)
        .join(models.User, models.User.id == models.ProducerAvailability.user_id)
    )
    if producer_id:
        q = q.filter(models.ProducerAvailability.user_id == producer_id)
    return q.order_by(
        func.lower(models.User.display_name),
        models.ProducerAvailability.date,
        models.ProducerAvailability.slot_start,
    ).all()


def group_by_producer(rows: List[models.ProducerAvailability]) -> List[dict]:
    """Group ordered rows into producer -> date -> slots."""
    groups: List[dict] = []
    by_producer = {}
    for row in rows:
        group = by_producer.get(row.user_id)
        if group is None:
            group = {"producer_id": row.user_id, "producer_name": row.producer_name, "days": [], "_days": {}}
            by_producer[row.user_id] = group
            groups.append(group)
        day = group["_days"].get(row.date)
        if day is None:
            day = {"date": row.date, "slots": []}
            group["_days"][row.date] = day
            group["days"].append(day)
        day["slots"].append({"slot_start": row.slot_start, "slot_end": row.slot_end})
    for group in groups:
        group.pop("_days")
    return groups
