"""
Domain-split SQLAlchemy models with a single import surface.

Exposes `Base`, `now_utc` and every ORM class so callers can use
`from tracker.db import models` and `models.Demand`.
"""

from .base import Base, now_utc  # re-export

from .users import User, UserRole
from .demands import Demand, DemandDeliverable
from .availability import ProducerAvailability
from .app_config import AppConfig
from .audit import AuditLog

__all__ = [
    # base
    "Base",
    "now_utc",
    # users
    "User",
    "UserRole",
    # demands
    "Demand",
    "DemandDeliverable",
    # availability
    "ProducerAvailability",
    # config/audit
    "AppConfig",
    "AuditLog",
]
