from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from app.models.storage_rule import StorageRule
from app.models.terminal import Terminal
from app.schemas.terminal import TerminalCreate, TerminalUpdate
from app.services.errors import NotFoundError, RuleValidationError

logger = logging.getLogger(__name__)


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise RuleValidationError("O nome do terminal é obrigatório.", field="name")
    return name


def _clean_code(code: Optional[str]) -> Optional[str]:
    code = (code or "").strip()
    return code or None


def list_terminals(db: Session) -> List[Terminal]:
    return db.query(Terminal).order_by(Terminal.name.asc()).all()


def get_terminal(db: Session, terminal_id: int) -> Terminal:
    terminal = db.query(Terminal).filter(Terminal.id == terminal_id).first()
    if terminal is None:
        raise NotFoundError("Terminal não encontrado.")
    return terminal


def get_terminal_with_rules(db: Session, terminal_id: int) -> Terminal:
    terminal = (
        db.query(Terminal)
        .options(selectinload(Terminal.storage_rules).selectinload(StorageRule.periods))
        .filter(Terminal.id == terminal_id)
        .first()
    )
    if terminal is None:
        raise NotFoundError("Terminal não encontrado.")
    return terminal


def create_terminal(db: Session, payload: TerminalCreate) -> Terminal:
    terminal = Terminal(name=_clean_name(payload.name), code=_clean_code(payload.code))
    db.add(terminal)
    db.commit()
    db.refresh(terminal)
    logger.info("Terminal %s criado (%s)", terminal.id, terminal.name)
    return terminal


def update_terminal(db: Session, terminal_id: int, payload: TerminalUpdate) -> Terminal:
    terminal = get_terminal(db, terminal_id)

    data = payload.model_dump(exclude_unset=True)
    if "name" in data:
        terminal.name = _clean_name(data["name"])
    if "code" in data:
        terminal.code = _clean_code(data["code"])

    db.commit()
    db.refresh(terminal)
    logger.info("Terminal %s atualizado", terminal.id)
    return terminal


def delete_terminal(db: Session, terminal_id: int) -> bool:
    """Remove o terminal junto com as regras e períodos dele."""
    terminal = get_terminal(db, terminal_id)
    rules_count = len(terminal.storage_rules)

    db.delete(terminal)
    db.commit()
    logger.info("Terminal %s removido com %s regra(s) de armazenagem", terminal_id, rules_count)
    return True
