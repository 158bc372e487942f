"""
Demand and deliverable repository functions.

Implements create/read/update/delete for demands, the same-day conflict range
query, artist aggregation and deliverable upserts. Visibility narrowing is
applied through ``assigned_to`` (set for producers, None for everyone else).
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from tracker.db import models, schemas
from tracker.utils.dates import local_date, same_day_bounds, to_utc
from tracker.utils.workflow import STATUS_WAITING

_UNSET = object()

DETAIL_FIELDS = ("name", "description", "artist_name", "producer_id", "start_at", "due_at")


def _visible(q, assigned_to: Optional[uuid.UUID]):
    if assigned_to is not None:
        q = q.filter(models.Demand.producer_id == assigned_to)
    return q


def get_demand(db: Session, demand_id: uuid.UUID, *, assigned_to: Optional[uuid.UUID] = None) -> Optional[models.Demand]:
    q = db.query(models.Demand).filter(models.Demand.id == demand_id)
    return _visible(q, assigned_to).first()


def get_demands(
    db: Session,
    *,
    assigned_to: Optional[uuid.UUID] = None,
    status: Optional[str] = None,
    producer_id: Optional[uuid.UUID] = None,
    producer_name: Optional[str] = None,
    artist: Optional[str] = None,
    created_since: Optional[datetime] = None,
    skip: int = 0,
    limit: Optional[int] = None,
) -> List[models.Demand]:
    """List demands newest first with optional filters."""
    q = _visible(db.query(models.Demand), assigned_to)
    if status:
        q = q.filter(models.Demand.status == status)
    if producer_id:
        q = q.filter(models.Demand.producer_id == producer_id)
    if producer_name:
        producer_ids = db.query(models.User.id).filter(models.User.display_name == producer_name)
        q = q.filter(models.Demand.producer_id.in_(producer_ids.scalar_subquery()))
    if artist and artist.strip():
        q = q.filter(func.trim(models.Demand.artist_name) == artist.strip())
    if created_since is not None:
        q = q.filter(models.Demand.created_at >= to_utc(created_since))
    q = q.order_by(models.Demand.created_at.desc())
    if skip:
        q = q.offset(skip)
    if limit is not None:
        q = q.limit(limit)
    return q.all()


def find_same_day_conflicts(
    db: Session,
    producer_id: uuid.UUID,
    due_at: datetime,
    *,
    exclude_id: Optional[uuid.UUID] = None,
    assigned_to: Optional[uuid.UUID] = None,
) -> List[models.Demand]:
    """Demands of the producer due on the same local calendar day as ``due_at``."""
    day_start, next_day = same_day_bounds(due_at)
    q = _visible(db.query(models.Demand), assigned_to).filter(
        models.Demand.producer_id == producer_id,
        models.Demand.due_at >= day_start,
        models.Demand.due_at < next_day,
    )
    if exclude_id is not None:
        q = q.filter(models.Demand.id != exclude_id)
    return q.order_by(models.Demand.due_at).all()


def create_demand(db: Session, demand: schemas.DemandCreate, created_by: uuid.UUID) -> models.Demand:
    db_demand = models.Demand(
        name=demand.name,
        description=demand.description,
        artist_name=demand.artist_name,
        producer_id=demand.producer_id,
        created_by=created_by,
        status=STATUS_WAITING,
        start_at=to_utc(demand.start_at),
        due_at=to_utc(demand.due_at),
    )
    db.add(db_demand)
    db.commit()
    db.refresh(db_demand)
    return db_demand


def update_demand(db: Session, db_demand: models.Demand, changes: Dict[str, Any]) -> models.Demand:
    for key, value in changes.items():
        if key in ("start_at", "due_at"):
            value = to_utc(value)
        setattr(db_demand, key, value)
    db.commit()
    db.refresh(db_demand)
    return db_demand


def set_status(db: Session, db_demand: models.Demand, status: str) -> models.Demand:
    db_demand.status = status
    db.commit()
    db.refresh(db_demand)
    return db_demand


def delete_demand(db: Session, db_demand: models.Demand) -> bool:
    demand_id = db_demand.id
    try:
        # Cascade removes the deliverable row as well
        db.delete(db_demand)
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        raise RuntimeError(f"Failed to delete demand {demand_id}: {str(e)}")


def artist_counts(db: Session, *, assigned_to: Optional[uuid.UUID] = None) -> List[Dict[str, Any]]:
    name = func.trim(models.Demand.artist_name)
    q = db.query(name.label("artist_name"), func.count(models.Demand.id).label("count")).filter(
        models.Demand.artist_name.isnot(None),
        name != "",
    )
    q = _visible(q, assigned_to)
    rows = q.group_by(name).order_by(func.lower(name)).all()
    return [{"artist_name": r.artist_name, "count": int(r.count)} for r in rows]


def busy_dates(db: Session, producer_id: uuid.UUID, *, since: Optional[datetime] = None) -> list:
    """Distinct local calendar dates on which the producer has a demand due."""
    q = db.query(models.Demand.due_at).filter(
        models.Demand.producer_id == producer_id,
        models.Demand.due_at.isnot(None),
    )
    if since is not None:
        q = q.filter(models.Demand.due_at >= to_utc(since))
    dates = {local_date(row.due_at) for row in q.all()}
    return sorted(dates)


# Deliverables
def get_deliverable(db: Session, demand_id: uuid.UUID) -> Optional[models.DemandDeliverable]:
    return db.query(models.DemandDeliverable).filter(models.DemandDeliverable.demand_id == demand_id).first()


def get_deliverables(db: Session, demand_ids: List[uuid.UUID]) -> Dict[uuid.UUID, models.DemandDeliverable]:
    if not demand_ids:
        return {}
    rows = db.query(models.DemandDeliverable).filter(models.DemandDeliverable.demand_id.in_(demand_ids)).all()
    return {row.demand_id: row for row in rows}


def upsert_deliverable_file(
    db: Session,
    demand_id: uuid.UUID,
    *,
    storage_path: str,
    file_name: str,
    content_type: Optional[str],
    size_bytes: Optional[int],
    uploaded_by: uuid.UUID,
    comments: Any = _UNSET,
) -> models.DemandDeliverable:
    """Create or replace the file of a deliverable; comments survive unless passed."""
    row = get_deliverable(db, demand_id)
    if row is None:
        row = models.DemandDeliverable(demand_id=demand_id)
        db.add(row)
    row.storage_path = storage_path
    row.file_name = file_name
    row.content_type = content_type
    row.size_bytes = size_bytes
    row.uploaded_by = uploaded_by
    if comments is not _UNSET:
        row.comments = comments
    db.commit()
    db.refresh(row)
    return row


def upsert_deliverable_comments(
    db: Session,
    demand_id: uuid.UUID,
    *,
    comments: Optional[str],
    user_id: uuid.UUID,
) -> models.DemandDeliverable:
    """Save comments only; file fields and the original uploader are kept."""
    row = get_deliverable(db, demand_id)
    if row is None:
        row = models.DemandDeliverable(demand_id=demand_id, uploaded_by=user_id)
        db.add(row)
    elif row.uploaded_by is None:
        row.uploaded_by = user_id
    row.comments = comments
    db.commit()
    db.refresh(row)
    return row
