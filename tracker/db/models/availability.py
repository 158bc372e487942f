import uuid
from sqlalchemy import Column, Date, Time, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class ProducerAvailability(Base):
    __tablename__ = 'producer_availability'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    date = Column(Date, nullable=False)
    slot_start = Column(Time, nullable=False)
    slot_end = Column(Time, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    user = relationship("User", lazy="joined")

    __table_args__ = (
        Index('ix_producer_availability_user_id_date', 'user_id', 'date'),
        UniqueConstraint('user_id', 'date', 'slot_start', 'slot_end', name='uq_producer_availability_slot'),
    )

    @property
    def producer_name(self):
        return self.user.display_name if self.user else None
