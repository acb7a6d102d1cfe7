from __future__ import annotations

from fastapi import HTTPException, status

from app.services.errors import (
    ExchangeRateUnavailableError,
    NoMatchingPeriodError,
    NotFoundError,
    RuleConflictError,
    RuleValidationError,
    StorageRuleError,
)


def to_http(exc: StorageRuleError) -> HTTPException:
    """Traduz o erro de domínio para a resposta HTTP com mensagem específica."""
    if isinstance(exc, NotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "not_found", "message": exc.message},
        )
    if isinstance(exc, RuleConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "code": "rule_conflict",
                "message": exc.message,
                "conflicting_rule_id": exc.conflicting_rule_id,
            },
        )
    if isinstance(exc, NoMatchingPeriodError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "code": "no_matching_period",
                "message": exc.message,
                "elapsed_days": exc.elapsed_days,
                "rule_id": exc.rule_id,
            },
        )
    if isinstance(exc, RuleValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": "validation_error", "message": exc.message, "field": exc.field},
        )
    if isinstance(exc, ExchangeRateUnavailableError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "exchange_rate_unavailable", "message": exc.message},
        )
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"code": "storage_rule_error", "message": exc.message},
    )
