from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx

from app.core.config import settings
from app.services.errors import ExchangeRateUnavailableError

logger = logging.getLogger(__name__)


async def fetch_exchange_rate(
    from_currency: str,
    to_currency: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Decimal:
    """Cotação de compra (bid) de ``from_currency`` em ``to_currency``."""
    if from_currency == to_currency:
        return Decimal("1")

    pair = f"{from_currency}-{to_currency}"
    url = f"{settings.EXCHANGE_API_URL.rstrip('/')}/{pair}"

    try:
        async with httpx.AsyncClient(timeout=settings.EXCHANGE_TIMEOUT_SECONDS, transport=transport) as client:
            r = await client.get(url)
            r.raise_for_status()
            data = r.json()
        bid = data[f"{from_currency}{to_currency}"]["bid"]  # string tipo "5.2345"
        rate = Decimal(str(bid))
    except (httpx.HTTPError, KeyError, TypeError, ValueError, InvalidOperation) as exc:
        logger.warning("Falha ao buscar cotação %s: %s", pair, exc)
        raise ExchangeRateUnavailableError(f"Não foi possível obter a cotação {pair}.") from exc

    if rate <= 0:
        raise ExchangeRateUnavailableError(f"Cotação {pair} inválida: {bid}.")

    logger.info("Cotação %s = %s", pair, rate)
    return rate
