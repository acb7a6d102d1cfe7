from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator

from app.core.config import settings
from app.models.enums import ChargeType, ContainerType, Currency, FeeBasis, ShipmentType
from app.models.storage_rule import RATE_SCALE
from app.services.periods import Period, find_coverage_gaps
from app.services.shipment_keys import FclKey, FclPartialKey, LclKey, ShipmentKey
from app.utils.money import decimal_places, fraction_to_percent, percent_to_fraction, strip_zeros, parse_decimal


# Aceita 10, "10", "10,5", "1.234,50"
FlexibleDecimal = Annotated[Decimal, BeforeValidator(parse_decimal)]


# ---------- entrada ----------

class AdditionalFeeIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    value: FlexibleDecimal = Field(ge=0)
    basis: FeeBasis


class StoragePeriodIn(BaseModel):
    days_from: int = Field(ge=0)
    days_to: Optional[int] = Field(default=None, ge=0)  # None = até infinito
    charge_type: ChargeType = ChargeType.PERCENTAGE
    # PERCENTAGE em pontos percentuais (1 = 1%); FIXED na moeda da regra
    rate: FlexibleDecimal = Field(ge=0)
    is_daily_rate: bool = True

    @model_validator(mode="after")
    def _check_rate_precision(self):
        # a taxa é gravada com RATE_SCALE casas; não arredondar em silêncio
        if decimal_places(self.to_period().rate) > RATE_SCALE:
            places = RATE_SCALE - 2 if self.charge_type is ChargeType.PERCENTAGE else RATE_SCALE
            raise ValueError(f"A taxa aceita no máximo {places} casas decimais.")
        return self

    def to_period(self) -> Period:
        rate = percent_to_fraction(self.rate) if self.charge_type is ChargeType.PERCENTAGE else self.rate
        return Period(
            days_from=self.days_from,
            days_to=self.days_to,
            charge_type=self.charge_type,
            rate=rate,
            is_daily_rate=self.is_daily_rate,
        )


class _StorageRuleBase(BaseModel):
    currency: Currency = Field(default_factory=lambda: Currency(settings.DEFAULT_CURRENCY))
    min_value: FlexibleDecimal = Field(default=Decimal("0"), ge=0)
    # pontos percentuais; só é aplicado em LCL
    cif_insurance: FlexibleDecimal = Field(default=Decimal("0"), ge=0, le=100)
    additional_fees: List[AdditionalFeeIn] = Field(default_factory=list)
    periods: List[StoragePeriodIn] = Field(min_length=1)

    @field_validator("cif_insurance")
    @classmethod
    def _check_cif_precision(cls, value: Decimal) -> Decimal:
        if decimal_places(percent_to_fraction(value)) > RATE_SCALE:
            raise ValueError(f"O seguro CIF aceita no máximo {RATE_SCALE - 2} casas decimais.")
        return value

    def domain_periods(self) -> List[Period]:
        return [p.to_period() for p in self.periods]


class FclRuleIn(_StorageRuleBase):
    shipment_type: Literal["FCL"]
    container_type: ContainerType

    def key(self) -> ShipmentKey:
        return FclKey(self.container_type)


class FclPartialRuleIn(_StorageRuleBase):
    shipment_type: Literal["FCL_PARTIAL"]
    container_type: None = None

    def key(self) -> ShipmentKey:
        return FclPartialKey()


class LclRuleIn(_StorageRuleBase):
    shipment_type: Literal["LCL"]
    container_type: None = None

    def key(self) -> ShipmentKey:
        return LclKey()


StorageRuleIn = Annotated[
    Union[FclRuleIn, FclPartialRuleIn, LclRuleIn],
    Field(discriminator="shipment_type"),
]


# ---------- saída ----------

class AdditionalFeeOut(BaseModel):
    name: str
    value: Decimal
    basis: FeeBasis


class StoragePeriodOut(BaseModel):
    id: Optional[int] = None
    days_from: int
    days_to: Optional[int] = None
    charge_type: ChargeType
    rate: Decimal  # mesma convenção da entrada
    is_daily_rate: bool

    @classmethod
    def from_period(cls, period) -> "StoragePeriodOut":
        charge_type = ChargeType(period.charge_type)
        rate = Decimal(period.rate)
        rate = fraction_to_percent(rate) if charge_type is ChargeType.PERCENTAGE else strip_zeros(rate)
        return cls(
            id=getattr(period, "id", None),
            days_from=period.days_from,
            days_to=period.days_to,
            charge_type=charge_type,
            rate=rate,
            is_daily_rate=bool(period.is_daily_rate),
        )


class DayRangeOut(BaseModel):
    days_from: int
    days_to: Optional[int] = None


class StorageRuleOut(BaseModel):
    id: int
    terminal_id: int
    shipment_type: ShipmentType
    container_type: Optional[ContainerType] = None
    currency: Currency
    min_value: Decimal
    cif_insurance: Decimal  # pontos percentuais
    additional_fees: List[AdditionalFeeOut] = []
    periods: List[StoragePeriodOut] = []

    # faixas de dias sem período (cobrança falha nelas)
    coverage_gaps: List[DayRangeOut] = []

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_rule(cls, rule) -> "StorageRuleOut":
        periods = sorted(rule.periods, key=lambda p: p.days_from)
        gaps: List[Tuple[int, Optional[int]]] = find_coverage_gaps(periods) if periods else []
        return cls(
            id=rule.id,
            terminal_id=rule.terminal_id,
            shipment_type=rule.shipment_type,
            container_type=rule.container_type,
            currency=rule.currency,
            min_value=Decimal(rule.min_value or 0),
            cif_insurance=fraction_to_percent(rule.cif_insurance or 0),
            additional_fees=[AdditionalFeeOut(**f) for f in (rule.additional_fees or [])],
            periods=[StoragePeriodOut.from_period(p) for p in periods],
            coverage_gaps=[DayRangeOut(days_from=a, days_to=b) for a, b in gaps],
            created_at=rule.created_at,
            updated_at=rule.updated_at,
        )


class StorageRuleDraftOut(BaseModel):
    """Cópia não salva de uma regra; envie ``draft`` para criar a nova regra."""

    terminal_id: int
    source_rule_id: int
    draft: StorageRuleIn
