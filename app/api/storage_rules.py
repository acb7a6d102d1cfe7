from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.api.errors import to_http
from app.core.database import get_db
from app.schemas.charge import ChargeBreakdownOut, StorageChargeIn
from app.schemas.storage_rule import StorageRuleDraftOut, StorageRuleIn, StorageRuleOut
from app.services.charges import compute_storage_charge, load_rule_terms
from app.services.errors import StorageRuleError
from app.services.storage_rules import (
    delete_storage_rule,
    duplicate_storage_rule,
    get_storage_rule,
    update_storage_rule,
)

router = APIRouter(prefix="/storage-rules", tags=["Storage Rules"])


@router.get("/{rule_id}", response_model=StorageRuleOut)
def get_rule(rule_id: int, db: Session = Depends(get_db)) -> StorageRuleOut:
    try:
        return StorageRuleOut.from_rule(get_storage_rule(db, rule_id))
    except StorageRuleError as e:
        raise to_http(e)


@router.put("/{rule_id}", response_model=StorageRuleOut)
def put_rule(rule_id: int, payload: StorageRuleIn, db: Session = Depends(get_db)) -> StorageRuleOut:
    try:
        return StorageRuleOut.from_rule(update_storage_rule(db, rule_id, payload))
    except StorageRuleError as e:
        raise to_http(e)


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_rule(rule_id: int, db: Session = Depends(get_db)) -> None:
    try:
        delete_storage_rule(db, rule_id)
    except StorageRuleError as e:
        raise to_http(e)


@router.post("/{rule_id}/duplicate", response_model=StorageRuleDraftOut)
def post_duplicate(rule_id: int, db: Session = Depends(get_db)) -> StorageRuleDraftOut:
    # Não grava nada: o rascunho precisa passar pela criação (e pelo conflito)
    try:
        return duplicate_storage_rule(db, rule_id)
    except StorageRuleError as e:
        raise to_http(e)


@router.post("/{rule_id}/charge", response_model=ChargeBreakdownOut)
async def post_charge(rule_id: int, payload: StorageChargeIn, db: Session = Depends(get_db)) -> ChargeBreakdownOut:
    try:
        # consulta síncrona do SQLAlchemy fora do event loop
        terms = await run_in_threadpool(load_rule_terms, db, rule_id)
        return await compute_storage_charge(terms, payload)
    except StorageRuleError as e:
        raise to_http(e)
