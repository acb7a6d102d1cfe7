# app/services/periods.py

"""Validação da lista de períodos (faixas de dias) de uma regra.

Funções puras: recebem qualquer objeto com ``days_from``, ``days_to``,
``charge_type``, ``rate`` e ``is_daily_rate`` (dataclass ``Period`` ou a linha
``StoragePeriod`` do banco). Taxas percentuais chegam aqui como fração.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from app.models.enums import ChargeType
from app.services.errors import RuleValidationError


@dataclass(frozen=True)
class Period:
    days_from: int
    days_to: Optional[int]
    charge_type: ChargeType
    rate: Decimal
    is_daily_rate: bool = True

    def covers(self, day: int) -> bool:
        return self.days_from <= day and (self.days_to is None or day <= self.days_to)


def _label(period, idx: int) -> str:
    if period.days_to is None:
        return f"Período #{idx + 1} (dia {period.days_from} em diante)"
    return f"Período #{idx + 1} (dias {period.days_from} a {period.days_to})"


def _check_single(period, idx: int) -> None:
    if period.days_from is None or period.days_from < 0:
        raise RuleValidationError(
            f"{_label(period, idx)}: o dia inicial deve ser maior ou igual a zero.",
            field=f"periods.{idx}.days_from",
        )
    if period.days_to is not None and period.days_to < period.days_from:
        raise RuleValidationError(
            f"{_label(period, idx)}: o dia final não pode ser menor que o inicial.",
            field=f"periods.{idx}.days_to",
        )

    rate = Decimal(period.rate)
    if rate < 0:
        raise RuleValidationError(
            f"{_label(period, idx)}: a taxa não pode ser negativa.",
            field=f"periods.{idx}.rate",
        )
    if ChargeType(period.charge_type) is ChargeType.PERCENTAGE and rate > 1:
        raise RuleValidationError(
            f"{_label(period, idx)}: a taxa percentual não pode passar de 100%.",
            field=f"periods.{idx}.rate",
        )


def validate_periods(periods: Sequence) -> List:
    """Valida os períodos e devolve uma cópia ordenada por ``days_from``.

    Rejeita lista vazia, faixas inválidas, sobreposição e mais de um período
    em aberto (o período em aberto, se existir, precisa ser o último).
    Lacunas entre períodos são permitidas; ver ``find_coverage_gaps``.
    """
    if not periods:
        raise RuleValidationError("Informe pelo menos um período.", field="periods")

    for idx, period in enumerate(periods):
        _check_single(period, idx)

    open_ended = [p for p in periods if p.days_to is None]
    if len(open_ended) > 1:
        raise RuleValidationError(
            "Apenas um período pode ficar sem dia final.",
            field="periods",
        )

    ordered = sorted(periods, key=lambda p: p.days_from)

    for idx, (prev, nxt) in enumerate(zip(ordered, ordered[1:])):
        if prev.days_to is None:
            raise RuleValidationError(
                f"{_label(prev, idx)}: o período sem dia final precisa ser o último.",
                field="periods",
            )
        if prev.days_to >= nxt.days_from:
            raise RuleValidationError(
                f"{_label(prev, idx)} se sobrepõe ao {_label(nxt, idx + 1)}.",
                field="periods",
            )

    return ordered


def find_coverage_gaps(periods: Sequence) -> List[Tuple[int, Optional[int]]]:
    """Intervalos de dias (inclusivos) sem período, a partir do dia 0.

    Espera uma lista já validada. Se o último período tiver dia final, o
    restante da linha do tempo aparece como ``(dia, None)``.
    """
    gaps: List[Tuple[int, Optional[int]]] = []
    next_day = 0

    for period in sorted(periods, key=lambda p: p.days_from):
        if period.days_from > next_day:
            gaps.append((next_day, period.days_from - 1))
        if period.days_to is None:
            return gaps
        next_day = max(next_day, period.days_to + 1)

    gaps.append((next_day, None))
    return gaps
