# app/services/conflicts.py

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.models.storage_rule import StorageRule
from app.services.errors import RuleConflictError
from app.services.shipment_keys import FclKey, FclPartialKey, ShipmentKey, container_key_of


def find_conflict(
    db: Session,
    terminal_id: int,
    key: ShipmentKey,
    exclude_rule_id: Optional[int] = None,
) -> Optional[StorageRule]:
    """Regra já cadastrada para a mesma chave no terminal, se houver.

    FCL compara também o container; FCL_PARTIAL e LCL são um bucket único por
    terminal. ``exclude_rule_id`` ignora a própria regra numa atualização.
    """
    query = db.query(StorageRule).filter(
        StorageRule.terminal_id == terminal_id,
        StorageRule.shipment_type == key.shipment_type.value,
        StorageRule.container_key == container_key_of(key),
    )
    if exclude_rule_id is not None:
        query = query.filter(StorageRule.id != exclude_rule_id)
    return query.order_by(StorageRule.id.asc()).first()


def conflict_message(key: ShipmentKey) -> str:
    if isinstance(key, FclKey):
        return f"Já existe uma regra FCL para o container {key.container_type.value} neste terminal."
    if isinstance(key, FclPartialKey):
        return "Já existe uma regra FCL Parcial para este terminal."
    return "Já existe uma regra LCL para este terminal."


def conflict_error(key: ShipmentKey, existing: Optional[StorageRule]) -> RuleConflictError:
    return RuleConflictError(
        conflict_message(key),
        conflicting_rule_id=existing.id if existing is not None else None,
    )
