"""
Key/value application settings stored in ``app_config``.
"""
from __future__ import annotations

from typing import Any
from sqlalchemy.orm import Session

from tracker.db import models

SETUP_COMPLETE_KEY = "setup_complete"


def get_value(db: Session, key: str, default: Any = None) -> Any:
    row = db.query(models.AppConfig).filter(models.AppConfig.key == key).first()
    if row is None:
        return default
    return row.value


def set_value(db: Session, key: str, value: Any, *, commit: bool = True) -> models.AppConfig:
    row = db.query(models.AppConfig).filter(models.AppConfig.key == key).first()
    if row is None:
        row = models.AppConfig(key=key, value=value)
        db.add(row)
    else:
        row.value = value
    if commit:
        db.commit()
        db.refresh(row)
    return row


def is_setup_complete(db: Session) -> bool:
    return get_value(db, SETUP_COMPLETE_KEY, False) is True
