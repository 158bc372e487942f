import uuid
import datetime as dt
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, model_validator


class AvailabilitySlotCreate(BaseModel):
    date: dt.date
    slot_start: dt.time
    slot_end: dt.time

    @model_validator(mode="after")
    def _slot_ordered(self):
        if self.slot_start >= self.slot_end:
            raise ValueError("slot_start must be before slot_end")
        return self


class AvailabilitySlot(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    date: dt.date
    slot_start: dt.time
    slot_end: dt.time
    created_at: Optional[dt.datetime] = None
    model_config = ConfigDict(from_attributes=True)


class AvailabilityRow(BaseModel):
    id: uuid.UUID
    producer_id: uuid.UUID
    producer_name: Optional[str] = None
    date: dt.date
    slot_start: dt.time
    slot_end: dt.time


class SlotRange(BaseModel):
    slot_start: dt.time
    slot_end: dt.time


class AvailabilityDay(BaseModel):
    date: dt.date
    slots: List[SlotRange]


class ProducerAvailabilityGroup(BaseModel):
    producer_id: uuid.UUID
    producer_name: Optional[str] = None
    days: List[AvailabilityDay]


class GroupedAvailability(BaseModel):
    producers: List[ProducerAvailabilityGroup]
