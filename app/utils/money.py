# app/utils/money.py

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")

# sinal opcional, prefixo de moeda opcional, depois só dígitos e separadores
_NUMBER_RE = re.compile(
    r"^\s*(?P<sign>-)?\s*(?:R\$|US\$|\$)?\s*(?P<inner_sign>-)?(?P<digits>[\d.,]+)\s*$"
)


def parse_decimal(value) -> Decimal:
    """
    Converte valores vindos de formulário para Decimal:
      - '1,5' -> 1.5 (vírgula decimal)
      - '1.234,50' -> 1234.50 e '1,234.50' -> 1234.50
      - 'R$ 1200' -> 1200 e 'R$ -500' -> -500
      - int/float/Decimal passam direto
    Qualquer outro texto ('1e3', '12abc3') levanta ValueError.
    """
    if isinstance(value, bool):
        raise ValueError("Valor numérico inválido.")
    if isinstance(value, (Decimal, int, float)):
        # str(float) evita o ruído binário (0.1 -> '0.1')
        result = value if isinstance(value, Decimal) else Decimal(str(value))
        if not result.is_finite():
            raise ValueError(f"Valor numérico inválido: {value!r}.")
        return result
    if value is None:
        raise ValueError("Valor numérico obrigatório.")

    match = _NUMBER_RE.match(str(value))
    if match is None or (match.group("sign") and match.group("inner_sign")):
        raise ValueError(f"Valor numérico inválido: {value!r}.")

    negative = bool(match.group("sign") or match.group("inner_sign"))
    s = match.group("digits")

    if "," in s and "." in s:
        # O último separador é o decimal
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif s.count(",") == 1:
        s = s.replace(",", ".")
    elif s.count(",") > 1:
        s = s.replace(",", "")
    elif s.count(".") > 1:
        s = s.replace(".", "")

    try:
        result = Decimal(s)
    except InvalidOperation:
        raise ValueError(f"Valor numérico inválido: {value!r}.")
    return -result if negative else result


def decimal_places(value: Decimal) -> int:
    # 0.0012345000 -> 7
    exponent = Decimal(value).normalize().as_tuple().exponent
    return max(-exponent, 0)


def quantize_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def percent_to_fraction(value: Decimal) -> Decimal:
    # 2 (%) -> 0.02
    return Decimal(value) / HUNDRED


def strip_zeros(value: Decimal) -> Decimal:
    # 1.500000 -> 1.5 e 100.000 -> 100 (sem notação 1E+2)
    value = Decimal(value)
    if value == value.to_integral_value():
        return value.quantize(Decimal(1))
    return value.normalize()


def fraction_to_percent(value: Decimal) -> Decimal:
    # 0.02 -> 2 (%)
    return strip_zeros(Decimal(value) * HUNDRED)
