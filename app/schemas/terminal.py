# app/schemas/terminal.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.storage_rule import StorageRuleOut


class TerminalBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    code: Optional[str] = Field(default=None, max_length=50)  # código Siscomex


class TerminalCreate(TerminalBase):
    pass


class TerminalUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    code: Optional[str] = Field(default=None, max_length=50)


class TerminalOut(TerminalBase):
    id: int
    created_at: Optional[datetime] = None

    # Pydantic v2:
    model_config = ConfigDict(from_attributes=True)


class TerminalWithRulesOut(TerminalOut):
    storage_rules: List[StorageRuleOut] = []

    @classmethod
    def from_terminal(cls, terminal) -> "TerminalWithRulesOut":
        return cls(
            id=terminal.id,
            name=terminal.name,
            code=terminal.code,
            created_at=terminal.created_at,
            storage_rules=[StorageRuleOut.from_rule(r) for r in terminal.storage_rules],
        )
