"""
Demand API endpoints.

CRUD, status workflow, the same-day conflict check on creation and the
read-only views the dashboard renders (stats, kanban board, artist report,
busy days).
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tracker.db.database import get_db
from tracker.db import schemas
from tracker.db.repositories import demands as demand_repo
from tracker.db.repositories import users as user_repo
from tracker.api.deps import require_any_role, require_capability
from tracker.api.permissions import (
    assigned_scope,
    can_edit_details,
    can_edit_phases,
    can_view_deliverable,
    is_assigned_producer,
)
from tracker.audit import AuditAction, log_demand
from tracker.services.storage_service import StorageError, get_storage_service
from tracker.utils.dates import ensure_aware
from tracker.utils.feature_flags import conflict_check_enabled
from tracker.utils.role_permissions import (
    CAP_CREATE_DEMAND,
    CAP_FILTER_DEMANDS,
    CAP_MANAGE_DEMANDS,
    ROLE_PRODUCER,
    role_has_capability,
)
from tracker.utils.workflow import (
    PERIOD_PRESETS,
    STATUS_LABELS,
    STATUS_ORDER,
    TransitionError,
    check_transition,
    count_due_soon,
    get_period_start,
    is_due_soon,
    is_overdue,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/demands", tags=["demands"])

CONFLICT_MESSAGE = "O produtor já tem demanda(s) com término neste dia."


def serialize_demand(demand, now: Optional[datetime] = None) -> schemas.Demand:
    now = now or datetime.now(timezone.utc)
    item = schemas.Demand.model_validate(demand)
    return item.model_copy(update={
        "start_at": ensure_aware(item.start_at),
        "due_at": ensure_aware(item.due_at),
        "is_due_soon": is_due_soon(demand.due_at, demand.status, now),
        "is_overdue": is_overdue(demand.due_at, demand.status, now),
    })


def serialize_with_deliverable(demand, deliverable, current_user, now: Optional[datetime] = None) -> schemas.DemandWithDeliverable:
    base = serialize_demand(demand, now)
    visible = deliverable is not None and can_view_deliverable(demand, current_user)
    return schemas.DemandWithDeliverable(
        **base.model_dump(),
        deliverable=schemas.Deliverable.model_validate(deliverable) if visible else None,
    )


def serialize_conflict(demand) -> schemas.DemandConflict:
    item = schemas.DemandConflict.model_validate(demand)
    return item.model_copy(update={"due_at": ensure_aware(item.due_at)})


def _period_start(period: Optional[str]) -> Optional[datetime]:
    if period is not None and period not in PERIOD_PRESETS:
        raise HTTPException(status_code=422, detail=f"period must be one of {list(PERIOD_PRESETS)}")
    return get_period_start(period)


def _ensure_filters_allowed(current_user, status_filter, producer_id, producer_name):
    if (status_filter or producer_id or producer_name) and not role_has_capability(current_user.get("role"), CAP_FILTER_DEMANDS):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Filtering not allowed for this role")


def _validate_status_filter(value: Optional[str]) -> Optional[str]:
    if value and value not in STATUS_ORDER:
        raise HTTPException(status_code=422, detail=f"status must be one of {STATUS_ORDER}")
    return value


def _ensure_producer(db: Session, producer_id: uuid.UUID) -> None:
    if not user_repo.is_producer(db, producer_id):
        raise HTTPException(status_code=422, detail="producer_id must reference a user with role produtor")


def _get_visible_or_404(db: Session, demand_id: uuid.UUID, current_user):
    demand = demand_repo.get_demand(db, demand_id, assigned_to=assigned_scope(current_user))
    if not demand:
        raise HTTPException(status_code=404, detail="Demand not found")
    return demand


@router.get("/", response_model=List[schemas.Demand])
def list_demands(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    producer_id: Optional[uuid.UUID] = None,
    producer_name: Optional[str] = None,
    artist: Optional[str] = None,
    period: Optional[str] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    _user, current_user = user_context
    _validate_status_filter(status_filter)
    _ensure_filters_allowed(current_user, status_filter, producer_id, producer_name)
    demands = demand_repo.get_demands(
        db,
        assigned_to=assigned_scope(current_user),
        status=status_filter,
        producer_id=producer_id,
        producer_name=producer_name,
        artist=artist,
        created_since=_period_start(period),
        skip=skip,
        limit=limit,
    )
    now = datetime.now(timezone.utc)
    return [serialize_demand(d, now) for d in demands]


@router.get("/conflicts", response_model=List[schemas.DemandConflict])
def list_conflicts(
    producer_id: uuid.UUID,
    due_at: datetime,
    exclude_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_capability(CAP_CREATE_DEMAND)),
):
    """Demands of ``producer_id`` due on the same calendar day as ``due_at``."""
    _user, current_user = user_context
    conflicts = demand_repo.find_same_day_conflicts(
        db, producer_id, due_at, exclude_id=exclude_id, assigned_to=assigned_scope(current_user),
    )
    return [serialize_conflict(d) for d in conflicts]


@router.get("/stats", response_model=schemas.DemandStats)
def demand_stats(
    period: Optional[str] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    _user, current_user = user_context
    demands = demand_repo.get_demands(
        db,
        assigned_to=assigned_scope(current_user),
        created_since=_period_start(period),
    )
    counts = {s: 0 for s in STATUS_ORDER}
    for d in demands:
        if d.status in counts:
            counts[d.status] += 1
    return schemas.DemandStats(counts=counts, due_soon_count=count_due_soon(demands), total=len(demands))


@router.get("/board", response_model=schemas.DemandBoard)
def demand_board(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    producer_id: Optional[uuid.UUID] = None,
    producer_name: Optional[str] = None,
    artist: Optional[str] = None,
    period: Optional[str] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    """Kanban columns in workflow order, each with its cards."""
    _user, current_user = user_context
    _validate_status_filter(status_filter)
    _ensure_filters_allowed(current_user, status_filter, producer_id, producer_name)
    demands = demand_repo.get_demands(
        db,
        assigned_to=assigned_scope(current_user),
        status=status_filter,
        producer_id=producer_id,
        producer_name=producer_name,
        artist=artist,
        created_since=_period_start(period),
    )
    deliverables = demand_repo.get_deliverables(db, [d.id for d in demands])
    now = datetime.now(timezone.utc)
    columns = []
    for column_status in STATUS_ORDER:
        items = [
            serialize_with_deliverable(d, deliverables.get(d.id), current_user, now)
            for d in demands
            if d.status == column_status
        ]
        columns.append(schemas.BoardColumn(
            id=column_status,
            label=STATUS_LABELS[column_status],
            count=len(items),
            items=items,
        ))
    return schemas.DemandBoard(columns=columns, due_soon_count=count_due_soon(demands, now))


@router.get("/report/artists", response_model=schemas.ArtistReport)
def artist_report(
    artist: Optional[str] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    _user, current_user = user_context
    scope = assigned_scope(current_user)
    selected = artist.strip() if artist and artist.strip() else None
    demands = demand_repo.get_demands(db, assigned_to=scope, artist=selected) if selected else []
    now = datetime.now(timezone.utc)
    return schemas.ArtistReport(
        artist=selected,
        demands=[serialize_demand(d, now) for d in demands],
        artists=[schemas.ArtistCount(**row) for row in demand_repo.artist_counts(db, assigned_to=scope)],
    )


@router.get("/busy-days", response_model=schemas.BusyDays)
def busy_days(
    producer_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    """Calendar dates on which a producer already has a demand due."""
    user, current_user = user_context
    if current_user.get("role") == ROLE_PRODUCER:
        if producer_id and producer_id != user.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        target = user.id
    else:
        if not producer_id:
            raise HTTPException(status_code=422, detail="producer_id is required")
        target = producer_id
    return schemas.BusyDays(producer_id=target, dates=demand_repo.busy_dates(db, target))


@router.post("/", response_model=schemas.Demand, status_code=status.HTTP_201_CREATED)
def create_demand(
    payload: schemas.DemandCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_capability(CAP_CREATE_DEMAND)),
):
    user, current_user = user_context
    _ensure_producer(db, payload.producer_id)

    if payload.due_at is not None and conflict_check_enabled() and not payload.confirm_conflicts:
        conflicts = demand_repo.find_same_day_conflicts(
            db, payload.producer_id, payload.due_at, assigned_to=assigned_scope(current_user),
        )
        if conflicts:
            logger.info(
                "demand_conflict_detected: producer_id=%s due_at=%s count=%s",
                payload.producer_id, payload.due_at.isoformat(), len(conflicts),
            )
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "message": CONFLICT_MESSAGE,
                    "conflicts": [
                        serialize_conflict(c).model_dump(mode="json") for c in conflicts
                    ],
                },
            )

    demand = demand_repo.create_demand(db, payload, created_by=user.id)
    logger.info("demand_created: id=%s producer_id=%s by=%s", demand.id, demand.producer_id, user.email)
    log_demand(
        db,
        actor_user_id=user.id,
        demand_id=demand.id,
        action=AuditAction.DEMAND_CREATE,
        metadata={"name": demand.name, "confirmed_conflicts": payload.confirm_conflicts},
    )
    return serialize_demand(demand)


@router.get("/{demand_id}", response_model=schemas.DemandWithDeliverable)
def get_demand(
    demand_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    _user, current_user = user_context
    demand = _get_visible_or_404(db, demand_id, current_user)
    return serialize_with_deliverable(demand, demand_repo.get_deliverable(db, demand.id), current_user)


@router.put("/{demand_id}", response_model=schemas.Demand)
def update_demand(
    demand_id: uuid.UUID,
    payload: schemas.DemandUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_capability(CAP_MANAGE_DEMANDS)),
):
    """Edit form: only the creator (or an admin) changes details and dates."""
    user, current_user = user_context
    demand = _get_visible_or_404(db, demand_id, current_user)
    sent = payload.model_dump(exclude_unset=True)
    new_status = sent.pop("status", None)

    changes = {}
    if can_edit_details(demand, current_user):
        changes = {k: v for k, v in sent.items() if k in demand_repo.DETAIL_FIELDS}
        if "name" in changes and not (changes["name"] or "").strip():
            raise HTTPException(status_code=422, detail="name must not be blank")
        if changes.get("producer_id") is not None:
            _ensure_producer(db, changes["producer_id"])
        elif "producer_id" in changes:
            changes.pop("producer_id")
        start_at = changes.get("start_at", demand.start_at)
        due_at = changes.get("due_at", demand.due_at)
        if start_at and due_at and ensure_aware(start_at) > ensure_aware(due_at):
            raise HTTPException(status_code=422, detail="start_at must not be after due_at")
    elif sent:
        logger.debug("demand_update_details_ignored: id=%s by=%s", demand.id, user.email)

    if new_status is not None:
        new_status = new_status.value if hasattr(new_status, "value") else new_status
        try:
            if check_transition(demand.status, new_status, current_user.get("role"), via_edit=True):
                changes["status"] = new_status
        except TransitionError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    previous_status = demand.status
    if changes:
        demand = demand_repo.update_demand(db, demand, changes)
        log_demand(
            db,
            actor_user_id=user.id,
            demand_id=demand.id,
            action=AuditAction.DEMAND_UPDATE,
            metadata={"fields": sorted(changes.keys()), "old_status": previous_status, "new_status": demand.status},
        )
    return serialize_demand(demand)


@router.patch("/{demand_id}/status", response_model=schemas.Demand)
def update_demand_status(
    demand_id: uuid.UUID,
    payload: schemas.DemandStatusUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    user, current_user = user_context
    demand = _get_visible_or_404(db, demand_id, current_user)
    target = payload.status.value
    previous = demand.status
    try:
        changed = check_transition(
            demand.status,
            target,
            current_user.get("role"),
            is_assigned=is_assigned_producer(demand, current_user),
        )
    except TransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if changed:
        demand = demand_repo.set_status(db, demand, target)
        logger.info("demand_status_changed: id=%s %s->%s by=%s", demand.id, previous, target, user.email)
        log_demand(
            db,
            actor_user_id=user.id,
            demand_id=demand.id,
            action=AuditAction.DEMAND_STATUS_CHANGE,
            metadata={"old_status": previous, "new_status": target},
        )
    return serialize_demand(demand)


@router.patch("/{demand_id}/phases", response_model=schemas.Demand)
def update_demand_phases(
    demand_id: uuid.UUID,
    payload: schemas.DemandPhasesUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_any_role),
):
    user, current_user = user_context
    demand = _get_visible_or_404(db, demand_id, current_user)
    if not can_edit_phases(demand, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if changes:
        demand = demand_repo.update_demand(db, demand, changes)
        log_demand(db, actor_user_id=user.id, demand_id=demand.id, action=AuditAction.DEMAND_PHASE_CHANGE, metadata=changes)
    return serialize_demand(demand)


@router.delete("/{demand_id}")
def delete_demand(
    demand_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_capability(CAP_MANAGE_DEMANDS)),
):
    user, current_user = user_context
    demand = _get_visible_or_404(db, demand_id, current_user)
    name = demand.name
    try:
        demand_repo.delete_demand(db, demand)
    except RuntimeError as exc:
        logger.error("demand_delete_failed: id=%s error=%s", demand_id, exc)
        raise HTTPException(status_code=500, detail="Failed to delete demand")
    try:
        get_storage_service().delete_prefix(str(demand_id))
    except (StorageError, OSError) as exc:
        logger.warning("deliverable_cleanup_failed: demand_id=%s error=%s", demand_id, exc)
    logger.info("demand_deleted: id=%s by=%s", demand_id, user.email)
    log_demand(db, actor_user_id=user.id, demand_id=demand_id, action=AuditAction.DEMAND_DELETE, metadata={"name": name})
    return {"message": "Demand deleted successfully"}
