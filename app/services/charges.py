# app/services/charges.py

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from sqlalchemy.orm import Session

from app.models.enums import Currency
from app.schemas.charge import ChargeBreakdownOut, StorageChargeIn
from app.schemas.storage_rule import AdditionalFeeOut, StoragePeriodOut
from app.services.exchange import fetch_exchange_rate
from app.services.shipment_keys import ShipmentKey
from app.services.storage_fees import RuleTerms, compute_charge, terms_from_rule
from app.services.storage_rules import get_storage_rule, resolve_storage_rule

logger = logging.getLogger(__name__)

RateFetcher = Callable[[str, str], Awaitable[Decimal]]


async def convert_cargo_value(
    payload: StorageChargeIn,
    rule_currency: Currency,
    fetch_rate: Optional[RateFetcher] = None,
) -> tuple[Decimal, Currency, Optional[Decimal]]:
    """Valor da carga na moeda da regra: (valor, moeda original, câmbio usado)."""
    cargo_currency = payload.cargo_currency or rule_currency
    if cargo_currency == rule_currency:
        return payload.cargo_value, cargo_currency, None

    exchange_rate = payload.exchange_rate
    if exchange_rate is None:
        fetch_rate = fetch_rate or fetch_exchange_rate
        exchange_rate = await fetch_rate(cargo_currency.value, rule_currency.value)

    return payload.cargo_value * exchange_rate, cargo_currency, exchange_rate


def load_rule_terms(db: Session, rule_id: int) -> RuleTerms:
    return terms_from_rule(get_storage_rule(db, rule_id))


def load_rule_terms_by_key(db: Session, terminal_id: int, key: ShipmentKey) -> RuleTerms:
    return terms_from_rule(resolve_storage_rule(db, terminal_id, key))


async def compute_storage_charge(
    terms: RuleTerms,
    payload: StorageChargeIn,
    fetch_rate: Optional[RateFetcher] = None,
) -> ChargeBreakdownOut:
    """Cobrança a partir de termos já carregados; não toca no banco."""
    cargo_value, cargo_currency, exchange_rate = await convert_cargo_value(payload, terms.currency, fetch_rate)

    breakdown = compute_charge(terms, payload.elapsed_days, cargo_value)

    logger.info(
        "Armazenagem regra=%s dias=%s total=%s %s (mínimo aplicado: %s)",
        terms.rule_id,
        payload.elapsed_days,
        breakdown.total,
        breakdown.currency.value,
        breakdown.min_value_applied,
    )

    return ChargeBreakdownOut(
        rule_id=breakdown.rule_id,
        currency=breakdown.currency,
        elapsed_days=breakdown.elapsed_days,
        billable_days=breakdown.billable_days,
        period=StoragePeriodOut.from_period(breakdown.period),
        cargo_value=breakdown.cargo_value,
        cargo_currency=cargo_currency,
        exchange_rate=exchange_rate,
        storage_base=breakdown.storage_base,
        storage_charge=breakdown.storage_charge,
        min_value_applied=breakdown.min_value_applied,
        insurance_add_on=breakdown.insurance_add_on,
        total=breakdown.total,
        additional_fees=[
            AdditionalFeeOut(name=f.name, value=f.value, basis=f.basis)
            for f in breakdown.additional_fees
        ],
    )
