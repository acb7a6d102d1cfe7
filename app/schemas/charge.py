# app/schemas/charge.py

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from app.models.enums import ContainerType, Currency, ShipmentType
from app.schemas.storage_rule import AdditionalFeeOut, FlexibleDecimal, StoragePeriodOut
from app.services.shipment_keys import ShipmentKey, make_key


class StorageChargeIn(BaseModel):
    elapsed_days: int = Field(ge=0)
    cargo_value: FlexibleDecimal = Field(default=Decimal("0"), ge=0)

    # Moeda do valor da carga; se diferente da moeda da regra, converte
    cargo_currency: Optional[Currency] = None
    # Opcional: se não vier, busca a cotação
    exchange_rate: Optional[FlexibleDecimal] = Field(default=None, gt=0)


class StorageChargeByKeyIn(StorageChargeIn):
    shipment_type: ShipmentType
    container_type: Optional[ContainerType] = None  # obrigatório só para FCL

    @model_validator(mode="after")
    def _check_key(self):
        # make_key levanta ValueError para FCL sem container
        make_key(self.shipment_type, self.container_type)
        return self

    def key(self) -> ShipmentKey:
        return make_key(self.shipment_type, self.container_type)


class ChargeBreakdownOut(BaseModel):
    rule_id: Optional[int] = None
    currency: Currency

    elapsed_days: int
    billable_days: int
    period: StoragePeriodOut

    # valor da carga já na moeda da regra
    cargo_value: Decimal
    cargo_currency: Currency
    exchange_rate: Optional[Decimal] = None

    storage_base: Decimal
    storage_charge: Decimal
    min_value_applied: bool
    insurance_add_on: Decimal
    total: Decimal

    # valor unitário; quem fatura multiplica pela quantidade (caixas, BLs...)
    additional_fees: List[AdditionalFeeOut] = []
