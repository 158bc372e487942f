import uuid
from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class Demand(Base):
    __tablename__ = 'demands'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    artist_name = Column(String, nullable=True, index=True)
    producer_id = Column(UUID(as_uuid=True), ForeignKey('users.id'), nullable=False)
    created_by = Column(UUID(as_uuid=True), ForeignKey('users.id'), nullable=False)
    # aguardando -> em_producao -> concluido
    status = Column(String, nullable=False, default='aguardando', index=True)
    phase_producao = Column(Boolean, nullable=False, default=False)
    phase_gravacao = Column(Boolean, nullable=False, default=False)
    phase_mix_master = Column(Boolean, nullable=False, default=False)
    start_at = Column(DateTime(timezone=True), nullable=True)
    due_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, index=True)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    producer = relationship("User", foreign_keys=[producer_id], lazy="joined")
    creator = relationship("User", foreign_keys=[created_by], lazy="joined")
    deliverable = relationship(
        "DemandDeliverable",
        back_populates="demand",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index('ix_demands_producer_id_due_at', 'producer_id', 'due_at'),
    )

    @property
    def producer_name(self):
        return self.producer.display_name if self.producer else None

    @property
    def solicitante_name(self):
        return self.creator.display_name if self.creator else None


class DemandDeliverable(Base):
    __tablename__ = 'demand_deliverables'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    demand_id = Column(UUID(as_uuid=True), ForeignKey('demands.id', ondelete='CASCADE'), nullable=False, unique=True)
    storage_path = Column(String, nullable=True)
    file_name = Column(String, nullable=True)
    content_type = Column(String, nullable=True)
    size_bytes = Column(Integer, nullable=True)
    comments = Column(Text, nullable=True)
    uploaded_by = Column(UUID(as_uuid=True), ForeignKey('users.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    demand = relationship("Demand", back_populates="deliverable")

    @property
    def has_file(self) -> bool:
        return bool(self.storage_path and self.file_name)
