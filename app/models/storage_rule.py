from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

# casas decimais das taxas gravadas (percentuais já em fração)
RATE_SCALE = 10


class StorageRule(Base):
    __tablename__ = "storage_rules"
    __table_args__ = (
        # Uma regra por (terminal, tipo de embarque, container normalizado)
        UniqueConstraint(
            "terminal_id",
            "shipment_type",
            "container_key",
            name="uq_storage_rules_terminal_shipment_container",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    terminal_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("terminals.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    # FCL | FCL_PARTIAL | LCL
    shipment_type: Mapped[str] = mapped_column(String(16), nullable=False)
    # GP_20 | GP_40 | HC_40 | RF_20 | RF_40, apenas para FCL
    container_type: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    # container_type para FCL, "" para FCL_PARTIAL e LCL
    container_key: Mapped[str] = mapped_column(String(8), nullable=False, default="")

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="BRL")
    min_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    # fração (0.02 = 2%), só vale para LCL
    cif_insurance: Mapped[Decimal] = mapped_column(Numeric(RATE_SCALE + 1, RATE_SCALE), nullable=False, default=Decimal("0"))

    # [{"name": ..., "value": "12.50", "basis": "PER_BL"}]
    additional_fees: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    terminal = relationship("Terminal", back_populates="storage_rules")
    periods = relationship(
        "StoragePeriod",
        back_populates="rule",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="StoragePeriod.days_from",
    )


class StoragePeriod(Base):
    __tablename__ = "storage_periods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    rule_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("storage_rules.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    days_from: Mapped[int] = mapped_column(Integer, nullable=False)
    # None = "até infinito"
    days_to: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # PERCENTAGE | FIXED
    charge_type: Mapped[str] = mapped_column(String(16), nullable=False, default="PERCENTAGE")
    # PERCENTAGE: fração do valor da carga; FIXED: valor na moeda da regra
    rate: Mapped[Decimal] = mapped_column(Numeric(RATE_SCALE + 10, RATE_SCALE), nullable=False)
    is_daily_rate: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    rule = relationship("StorageRule", back_populates="periods")
