"""
Condo Sync - Stored Document Model
Documento genérico de uma coleção (users, requests, reservations...)
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON, Index

from condosync.database import Base


class StoredDocument(Base):
    """Documento JSON identificado por (coleção, id)"""
    __tablename__ = "store_documents"

    collection = Column(String(64), primary_key=True)
    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))

    data = Column(JSON, nullable=False, default=dict)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_store_documents_collection_created", "collection", "created_at"),
    )

    def to_dict(self) -> dict:
        return {**(self.data or {}), "id": self.id}
