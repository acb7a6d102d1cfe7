# app/models/terminal.py

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from app.core.database import Base


class Terminal(Base):
    __tablename__ = "terminals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=True)  # código Siscomex

    created_at = Column(DateTime, default=datetime.utcnow)

    # Regras de armazenagem saem junto com o terminal
    storage_rules = relationship(
        "StorageRule",
        back_populates="terminal",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="StorageRule.id",
    )
