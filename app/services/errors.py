# app/services/errors.py

from __future__ import annotations

from typing import Optional


class StorageRuleError(Exception):
    """Base dos erros de domínio das regras de armazenagem."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RuleValidationError(StorageRuleError):
    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class RuleConflictError(StorageRuleError):
    def __init__(self, message: str, conflicting_rule_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.conflicting_rule_id = conflicting_rule_id


class NotFoundError(StorageRuleError):
    pass


class NoMatchingPeriodError(StorageRuleError):
    """Nenhum período cobre os dias decorridos (lacuna na configuração)."""

    def __init__(self, elapsed_days: int, rule_id: Optional[int] = None) -> None:
        super().__init__(
            f"Nenhum período da regra cobre {elapsed_days} dia(s) de armazenagem. "
            "Cadastre um período que cubra esse intervalo."
        )
        self.elapsed_days = elapsed_days
        self.rule_id = rule_id


class ExchangeRateUnavailableError(StorageRuleError):
    pass
