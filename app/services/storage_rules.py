"""Persistência das regras de armazenagem de um terminal.

Toda escrita valida antes de tocar no banco, checa conflito de chave e grava
regra + períodos numa única transação. A lista de períodos é sempre
substituída por inteiro (delete-orphan), nunca mesclada.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import TypeAdapter
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.models.enums import ChargeType, ShipmentType
from app.models.storage_rule import StoragePeriod, StorageRule
from app.models.terminal import Terminal
from app.schemas.storage_rule import StorageRuleDraftOut, StorageRuleIn, StorageRuleOut
from app.services.conflicts import conflict_error, find_conflict
from app.services.errors import NotFoundError
from app.services.periods import Period, find_coverage_gaps, validate_periods
from app.services.shipment_keys import (
    ShipmentKey,
    container_key_of,
    container_type_of,
    describe_key,
)
from app.utils.money import percent_to_fraction

logger = logging.getLogger(__name__)

_rule_input_adapter = TypeAdapter(StorageRuleIn)


def _lock_terminal(db: Session, terminal_id: int) -> Terminal:
    # FOR UPDATE serializa escritas concorrentes no mesmo terminal (no-op no SQLite)
    terminal = (
        db.query(Terminal)
        .filter(Terminal.id == terminal_id)
        .with_for_update()
        .first()
    )
    if terminal is None:
        db.rollback()
        raise NotFoundError("Terminal não encontrado.")
    return terminal


def _validated_periods(payload) -> List[Period]:
    periods = validate_periods(payload.domain_periods())
    gaps = find_coverage_gaps(periods)
    if gaps:
        logger.warning(
            "Regra %s com dias sem cobertura: %s",
            describe_key(payload.key()),
            ", ".join(f"{a} em diante" if b is None else f"{a}-{b}" for a, b in gaps),
        )
    return periods


def _period_rows(periods: List[Period]) -> List[StoragePeriod]:
    return [
        StoragePeriod(
            days_from=p.days_from,
            days_to=p.days_to,
            charge_type=ChargeType(p.charge_type).value,
            rate=p.rate,
            is_daily_rate=p.is_daily_rate,
        )
        for p in periods
    ]


def _apply_payload(rule: StorageRule, payload, periods: List[Period]) -> None:
    key = payload.key()
    rule.shipment_type = key.shipment_type.value
    rule.container_type = container_type_of(key)
    rule.container_key = container_key_of(key)
    rule.currency = payload.currency.value
    rule.min_value = payload.min_value
    # seguro CIF só existe para LCL
    rule.cif_insurance = (
        percent_to_fraction(payload.cif_insurance)
        if key.shipment_type is ShipmentType.LCL
        else 0
    )
    rule.additional_fees = [
        {"name": f.name.strip(), "value": str(f.value), "basis": f.basis.value}
        for f in payload.additional_fees
    ]
    rule.periods = _period_rows(periods)


def _commit_or_conflict(db: Session, terminal_id: int, key: ShipmentKey, exclude_rule_id: Optional[int] = None) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # outra transação gravou a mesma chave entre a checagem e o commit
        existing = find_conflict(db, terminal_id, key, exclude_rule_id=exclude_rule_id)
        if existing is not None:
            logger.warning("Conflito de regra detectado no commit: terminal=%s %s", terminal_id, describe_key(key))
            raise conflict_error(key, existing) from exc
        if db.query(Terminal.id).filter(Terminal.id == terminal_id).first() is None:
            raise NotFoundError("Terminal não encontrado.") from exc
        raise


def create_storage_rule(db: Session, terminal_id: int, payload: StorageRuleIn) -> StorageRule:
    key = payload.key()
    periods = _validated_periods(payload)

    _lock_terminal(db, terminal_id)

    existing = find_conflict(db, terminal_id, key)
    if existing is not None:
        db.rollback()
        logger.warning("Regra %s já existe no terminal %s (regra %s)", describe_key(key), terminal_id, existing.id)
        raise conflict_error(key, existing)

    rule = StorageRule(terminal_id=terminal_id)
    _apply_payload(rule, payload, periods)
    db.add(rule)

    _commit_or_conflict(db, terminal_id, key)
    db.refresh(rule)

    logger.info("Regra %s criada: %s no terminal %s", rule.id, describe_key(key), terminal_id)
    return rule


def update_storage_rule(db: Session, rule_id: int, payload: StorageRuleIn) -> StorageRule:
    key = payload.key()
    periods = _validated_periods(payload)

    rule = get_storage_rule(db, rule_id)
    _lock_terminal(db, rule.terminal_id)

    existing = find_conflict(db, rule.terminal_id, key, exclude_rule_id=rule.id)
    if existing is not None:
        db.rollback()
        logger.warning("Atualização da regra %s conflita com a regra %s", rule_id, existing.id)
        raise conflict_error(key, existing)

    _apply_payload(rule, payload, periods)

    _commit_or_conflict(db, rule.terminal_id, key, exclude_rule_id=rule.id)
    db.refresh(rule)

    logger.info("Regra %s atualizada: %s, %s período(s)", rule.id, describe_key(key), len(periods))
    return rule


def delete_storage_rule(db: Session, rule_id: int) -> bool:
    rule = get_storage_rule(db, rule_id)
    db.delete(rule)
    db.commit()
    logger.info("Regra %s removida", rule_id)
    return True


def get_storage_rule(db: Session, rule_id: int) -> StorageRule:
    rule = (
        db.query(StorageRule)
        .options(selectinload(StorageRule.periods))
        .filter(StorageRule.id == rule_id)
        .first()
    )
    if rule is None:
        raise NotFoundError("Regra não encontrada.")
    return rule


def get_rules_by_terminal(db: Session, terminal_id: int) -> List[StorageRule]:
    if db.query(Terminal.id).filter(Terminal.id == terminal_id).first() is None:
        raise NotFoundError("Terminal não encontrado.")

    return (
        db.query(StorageRule)
        .options(selectinload(StorageRule.periods))
        .filter(StorageRule.terminal_id == terminal_id)
        .order_by(StorageRule.shipment_type.asc(), StorageRule.container_key.asc())
        .all()
    )


def resolve_storage_rule(db: Session, terminal_id: int, key: ShipmentKey) -> StorageRule:
    """Regra aplicável a um embarque (terminal + tipo + container)."""
    if db.query(Terminal.id).filter(Terminal.id == terminal_id).first() is None:
        raise NotFoundError("Terminal não encontrado.")

    rule = find_conflict(db, terminal_id, key)
    if rule is None:
        raise NotFoundError(f"Nenhuma regra de armazenagem {describe_key(key)} cadastrada para este terminal.")
    return rule


def duplicate_storage_rule(db: Session, rule_id: int) -> StorageRuleDraftOut:
    """Rascunho (não salvo) com os mesmos dados da regra.

    Salvar o rascunho sem mudar a chave cai no conflito com a regra de origem.
    """
    rule = get_storage_rule(db, rule_id)
    source = StorageRuleOut.from_rule(rule)

    draft = _rule_input_adapter.validate_python(
        {
            "shipment_type": source.shipment_type.value,
            "container_type": source.container_type.value if source.container_type else None,
            "currency": source.currency.value,
            "min_value": source.min_value,
            "cif_insurance": source.cif_insurance,
            "additional_fees": [f.model_dump() for f in source.additional_fees],
            "periods": [p.model_dump(exclude={"id"}) for p in source.periods],
        }
    )
    logger.info("Regra %s duplicada como rascunho", rule_id)
    return StorageRuleDraftOut(terminal_id=rule.terminal_id, source_rule_id=rule.id, draft=draft)
