import uuid
from enum import Enum
from datetime import date, datetime
from typing import Optional, List, Dict
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tracker.utils.dates import ensure_aware
from tracker.utils.workflow import STATUS_WAITING, STATUS_IN_PRODUCTION, STATUS_DONE


class DemandStatus(str, Enum):
    aguardando = STATUS_WAITING
    em_producao = STATUS_IN_PRODUCTION
    concluido = STATUS_DONE


def _strip_or_none(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class DemandBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    artist_name: Optional[str] = None
    start_at: Optional[datetime] = None
    due_at: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("description", "artist_name")
    @classmethod
    def _blank_to_none(cls, v):
        return _strip_or_none(v)

    @model_validator(mode="after")
    def _dates_ordered(self):
        if self.start_at and self.due_at and ensure_aware(self.start_at) > ensure_aware(self.due_at):
            raise ValueError("start_at must not be after due_at")
        return self


class DemandCreate(DemandBase):
    producer_id: uuid.UUID
    confirm_conflicts: bool = False


class DemandUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    artist_name: Optional[str] = None
    producer_id: Optional[uuid.UUID] = None
    start_at: Optional[datetime] = None
    due_at: Optional[datetime] = None
    status: Optional[DemandStatus] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("description", "artist_name")
    @classmethod
    def _blank_to_none(cls, v):
        return _strip_or_none(v)

    @model_validator(mode="after")
    def _dates_ordered(self):
        if self.start_at and self.due_at and ensure_aware(self.start_at) > ensure_aware(self.due_at):
            raise ValueError("start_at must not be after due_at")
        return self


class DemandStatusUpdate(BaseModel):
    status: DemandStatus


class DemandPhasesUpdate(BaseModel):
    phase_producao: Optional[bool] = None
    phase_gravacao: Optional[bool] = None
    phase_mix_master: Optional[bool] = None


class Deliverable(BaseModel):
    id: uuid.UUID
    demand_id: uuid.UUID
    storage_path: Optional[str] = None
    file_name: Optional[str] = None
    content_type: Optional[str] = None
    size_bytes: Optional[int] = None
    comments: Optional[str] = None
    uploaded_by: Optional[uuid.UUID] = None
    has_file: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class DeliverableCommentsUpdate(BaseModel):
    comments: Optional[str] = None

    @field_validator("comments")
    @classmethod
    def _blank_to_none(cls, v):
        return _strip_or_none(v)


class Demand(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    artist_name: Optional[str] = None
    producer_id: uuid.UUID
    producer_name: Optional[str] = None
    created_by: uuid.UUID
    solicitante_name: Optional[str] = None
    status: str
    phase_producao: bool = False
    phase_gravacao: bool = False
    phase_mix_master: bool = False
    start_at: Optional[datetime] = None
    due_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_due_soon: bool = False
    is_overdue: bool = False
    model_config = ConfigDict(from_attributes=True)


class DemandWithDeliverable(Demand):
    deliverable: Optional[Deliverable] = None


class DemandConflict(BaseModel):
    id: uuid.UUID
    name: str
    artist_name: Optional[str] = None
    status: str
    due_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class BoardColumn(BaseModel):
    id: str
    label: str
    count: int
    items: List[DemandWithDeliverable]


class DemandBoard(BaseModel):
    columns: List[BoardColumn]
    due_soon_count: int = 0


class DemandStats(BaseModel):
    counts: Dict[str, int]
    due_soon_count: int
    total: int


class ArtistCount(BaseModel):
    artist_name: str
    count: int


class ArtistReport(BaseModel):
    artist: Optional[str] = None
    demands: List[Demand]
    artists: List[ArtistCount]


class BusyDays(BaseModel):
    producer_id: uuid.UUID
    dates: List[date]
