"""
Domain-split Pydantic schemas with a single import surface.

Callers use `from tracker.db import schemas` and `schemas.DemandCreate`.
"""

from .users import (
    UserBase,
    UserCreate,
    User,
    CreatedUser,
    UserWithRole,
    RoleUpdate,
    Producer,
    SetupStatus,
    SetupAdminCreate,
)
from .demands import (
    DemandStatus,
    DemandBase,
    DemandCreate,
    DemandUpdate,
    DemandStatusUpdate,
    DemandPhasesUpdate,
    Demand,
    DemandWithDeliverable,
    DemandConflict,
    Deliverable,
    DeliverableCommentsUpdate,
    BoardColumn,
    DemandBoard,
    DemandStats,
    ArtistCount,
    ArtistReport,
    BusyDays,
)
from .availability import (
    AvailabilitySlotCreate,
    AvailabilitySlot,
    AvailabilityRow,
    SlotRange,
    AvailabilityDay,
    ProducerAvailabilityGroup,
    GroupedAvailability,
)
from .audits import AuditLogBase, AuditLogCreate, AuditLog

__all__ = [
    # users / setup
    "UserBase",
    "UserCreate",
    "User",
    "CreatedUser",
    "UserWithRole",
    "RoleUpdate",
    "Producer",
    "SetupStatus",
    "SetupAdminCreate",
    # demands
    "DemandStatus",
    "DemandBase",
    "DemandCreate",
    "DemandUpdate",
    "DemandStatusUpdate",
    "DemandPhasesUpdate",
    "Demand",
    "DemandWithDeliverable",
    "DemandConflict",
    "Deliverable",
    "DeliverableCommentsUpdate",
    "BoardColumn",
    "DemandBoard",
    "DemandStats",
    "ArtistCount",
    "ArtistReport",
    "BusyDays",
    # availability
    "AvailabilitySlotCreate",
    "AvailabilitySlot",
    "AvailabilityRow",
    "SlotRange",
    "AvailabilityDay",
    "ProducerAvailabilityGroup",
    "GroupedAvailability",
    # audits
    "AuditLogBase",
    "AuditLogCreate",
    "AuditLog",
]
