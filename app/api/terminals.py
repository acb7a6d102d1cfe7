# app/api/terminals.py

from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.api.errors import to_http
from app.core.database import get_db
from app.schemas.charge import ChargeBreakdownOut, StorageChargeByKeyIn
from app.schemas.storage_rule import StorageRuleIn, StorageRuleOut
from app.schemas.terminal import (
    TerminalCreate,
    TerminalOut,
    TerminalUpdate,
    TerminalWithRulesOut,
)
from app.services.charges import compute_storage_charge, load_rule_terms_by_key
from app.services.errors import StorageRuleError
from app.services.storage_rules import (
    create_storage_rule,
    get_rules_by_terminal,
)
from app.services.terminals import (
    create_terminal,
    delete_terminal,
    get_terminal_with_rules,
    list_terminals,
    update_terminal,
)


router = APIRouter(prefix="/terminals", tags=["terminals"])


@router.get("/", response_model=List[TerminalOut])
def list_all_terminals(db: Session = Depends(get_db)):
    """
    Lista os terminais em ordem alfabética.
    """
    return list_terminals(db)


@router.post("/", response_model=TerminalOut, status_code=status.HTTP_201_CREATED)
def post_terminal(payload: TerminalCreate, db: Session = Depends(get_db)):
    try:
        return create_terminal(db, payload)
    except StorageRuleError as e:
        raise to_http(e)


@router.get("/{terminal_id}", response_model=TerminalWithRulesOut)
def get_terminal(terminal_id: int, db: Session = Depends(get_db)):
    """
    Terminal com as regras de armazenagem e seus períodos.
    """
    try:
        terminal = get_terminal_with_rules(db, terminal_id)
    except StorageRuleError as e:
        raise to_http(e)
    return TerminalWithRulesOut.from_terminal(terminal)


@router.put("/{terminal_id}", response_model=TerminalOut)
def put_terminal(terminal_id: int, payload: TerminalUpdate, db: Session = Depends(get_db)):
    try:
        return update_terminal(db, terminal_id, payload)
    except StorageRuleError as e:
        raise to_http(e)


@router.delete("/{terminal_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_terminal(terminal_id: int, db: Session = Depends(get_db)):
    """
    Remove o terminal. As regras e períodos dele são apagados junto.
    """
    try:
        delete_terminal(db, terminal_id)
    except StorageRuleError as e:
        raise to_http(e)
    return None


@router.get("/{terminal_id}/storage-rules", response_model=List[StorageRuleOut])
def list_storage_rules(terminal_id: int, db: Session = Depends(get_db)):
    try:
        rules = get_rules_by_terminal(db, terminal_id)
    except StorageRuleError as e:
        raise to_http(e)
    return [StorageRuleOut.from_rule(r) for r in rules]


@router.post(
    "/{terminal_id}/storage-rules",
    response_model=StorageRuleOut,
    status_code=status.HTTP_201_CREATED,
)
def post_storage_rule(terminal_id: int, payload: StorageRuleIn, db: Session = Depends(get_db)):
    """
    Cria uma regra de armazenagem:
    - valida os períodos (sem sobreposição, no máximo um sem dia final)
    - recusa se já existir regra para a mesma chave no terminal
    - percentuais em pontos (1 = 1%)
    """
    try:
        rule = create_storage_rule(db, terminal_id, payload)
    except StorageRuleError as e:
        raise to_http(e)
    return StorageRuleOut.from_rule(rule)


@router.post("/{terminal_id}/storage-charge", response_model=ChargeBreakdownOut)
async def post_storage_charge_by_key(
    terminal_id: int,
    payload: StorageChargeByKeyIn,
    db: Session = Depends(get_db),
):
    """
    Calcula a armazenagem localizando a regra pelo tipo de embarque/container.
    """
    try:
        # consulta síncrona do SQLAlchemy fora do event loop
        terms = await run_in_threadpool(load_rule_terms_by_key, db, terminal_id, payload.key())
        return await compute_storage_charge(terms, payload)
    except StorageRuleError as e:
        raise to_http(e)
