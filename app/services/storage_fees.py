# app/services/storage_fees.py

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple

from app.models.enums import ChargeType, Currency, FeeBasis
from app.services.errors import NoMatchingPeriodError, RuleValidationError
from app.services.periods import Period
from app.services.shipment_keys import LclKey, ShipmentKey, key_of_rule
from app.utils.money import quantize_money


@dataclass(frozen=True)
class AdditionalFee:
    name: str
    value: Decimal
    basis: FeeBasis


@dataclass(frozen=True)
class RuleTerms:
    """Os termos de cobrança de uma regra, desacoplados do ORM."""

    key: ShipmentKey
    periods: Tuple[Period, ...]
    min_value: Decimal = Decimal("0")
    cif_insurance: Decimal = Decimal("0")  # fração
    currency: Currency = Currency.BRL
    additional_fees: Tuple[AdditionalFee, ...] = ()
    rule_id: Optional[int] = None


@dataclass(frozen=True)
class ChargeBreakdown:
    period: Period
    elapsed_days: int
    billable_days: int
    cargo_value: Decimal
    storage_base: Decimal
    storage_charge: Decimal
    min_value_applied: bool
    insurance_add_on: Decimal
    total: Decimal
    currency: Currency
    additional_fees: Tuple[AdditionalFee, ...] = field(default_factory=tuple)
    rule_id: Optional[int] = None


def terms_from_rule(rule) -> RuleTerms:
    """Converte uma ``StorageRule`` do banco nos termos usados no cálculo."""
    periods = tuple(
        Period(
            days_from=p.days_from,
            days_to=p.days_to,
            charge_type=ChargeType(p.charge_type),
            rate=Decimal(p.rate),
            is_daily_rate=bool(p.is_daily_rate),
        )
        for p in sorted(rule.periods, key=lambda p: p.days_from)
    )
    fees = tuple(
        AdditionalFee(
            name=f["name"],
            value=Decimal(str(f["value"])),
            basis=FeeBasis(f["basis"]),
        )
        for f in (rule.additional_fees or [])
    )
    return RuleTerms(
        key=key_of_rule(rule),
        periods=periods,
        min_value=Decimal(rule.min_value or 0),
        cif_insurance=Decimal(rule.cif_insurance or 0),
        currency=Currency(rule.currency),
        additional_fees=fees,
        rule_id=rule.id,
    )


def find_period(periods, elapsed_days: int) -> Optional[Period]:
    for period in periods:
        if period.covers(elapsed_days):
            return period
    return None


def billable_days(period: Period, elapsed_days: int) -> int:
    """Dias cobrados dentro da faixa, contando o dia inicial e o dia atual.

    Ex.: faixa de 0 a 9 com 5 dias decorridos cobra os dias 0..5, ou seja, 6 dias.
    """
    days = elapsed_days - period.days_from + 1
    if period.days_to is not None:
        days = min(days, period.days_to - period.days_from + 1)
    return max(days, 0)


def compute_charge(terms: RuleTerms, elapsed_days: int, cargo_value: Decimal) -> ChargeBreakdown:
    """Calcula a armazenagem para ``elapsed_days`` dias no terminal.

    - localiza o período que contém ``elapsed_days`` (sem período: erro, nunca zero)
    - PERCENTAGE cobra ``cargo_value * rate``; FIXED cobra ``rate``
    - taxa diária multiplica pelos dias cobrados dentro da faixa
    - LCL soma o seguro CIF sobre o valor da carga
    - o valor mínimo da regra é piso apenas da armazenagem
    - taxas adicionais voltam como linhas (valor unitário + base)
    """
    if elapsed_days is None or elapsed_days < 0:
        raise RuleValidationError("Os dias decorridos devem ser maiores ou iguais a zero.", field="elapsed_days")
    cargo_value = Decimal(cargo_value)
    if cargo_value < 0:
        raise RuleValidationError("O valor da carga não pode ser negativo.", field="cargo_value")

    period = find_period(terms.periods, elapsed_days)
    if period is None:
        raise NoMatchingPeriodError(elapsed_days, rule_id=terms.rule_id)

    if ChargeType(period.charge_type) is ChargeType.PERCENTAGE:
        base = cargo_value * Decimal(period.rate)
    else:
        base = Decimal(period.rate)

    days = billable_days(period, elapsed_days)
    if period.is_daily_rate:
        base = base * days

    storage_base = quantize_money(base)
    min_value = quantize_money(terms.min_value)
    min_value_applied = storage_base < min_value
    storage_charge = min_value if min_value_applied else storage_base

    insurance = Decimal("0")
    if isinstance(terms.key, LclKey) and terms.cif_insurance > 0:
        insurance = cargo_value * terms.cif_insurance
    insurance_add_on = quantize_money(insurance)

    return ChargeBreakdown(
        period=period,
        elapsed_days=elapsed_days,
        billable_days=days if period.is_daily_rate else 1,
        cargo_value=cargo_value,
        storage_base=storage_base,
        storage_charge=storage_charge,
        min_value_applied=min_value_applied,
        insurance_add_on=insurance_add_on,
        total=storage_charge + insurance_add_on,
        currency=terms.currency,
        additional_fees=terms.additional_fees,
        rule_id=terms.rule_id,
    )
