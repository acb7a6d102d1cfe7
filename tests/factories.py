"""Builders de payloads usados nos testes."""

from decimal import Decimal

from app.models.enums import ChargeType, ContainerType, Currency
from app.services.periods import Period
from app.services.shipment_keys import FclKey, LclKey
from app.services.storage_fees import RuleTerms


def rule_payload(shipment_type="FCL", container_type="GP_20", periods=None, **overrides):
    """Payload no formato da API (percentuais em pontos)."""
    data = {
        "shipment_type": shipment_type,
        "min_value": "0",
        "additional_fees": [],
        "periods": periods
        if periods is not None
        else [
            {"days_from": 0, "days_to": 9, "charge_type": "PERCENTAGE", "rate": "1", "is_daily_rate": True},
            {"days_from": 10, "days_to": None, "charge_type": "FIXED", "rate": "250", "is_daily_rate": False},
        ],
    }
    if container_type is not None:
        data["container_type"] = container_type
    data.update(overrides)
    return data


def make_terms(*periods, key=None, min_value="0", cif_insurance="0", fees=()):
    """Termos de regra prontos para o calculador (percentuais em fração)."""
    return RuleTerms(
        key=key or FclKey(ContainerType.GP_20),
        periods=tuple(periods),
        min_value=Decimal(min_value),
        cif_insurance=Decimal(cif_insurance),
        currency=Currency.BRL,
        additional_fees=tuple(fees),
    )


def fixed(days_from, days_to, rate, daily=False):
    return Period(days_from, days_to, ChargeType.FIXED, Decimal(rate), daily)


def percentage(days_from, days_to, rate, daily=True):
    return Period(days_from, days_to, ChargeType.PERCENTAGE, Decimal(rate), daily)


LCL = LclKey()
