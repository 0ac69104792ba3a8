import re
import time
import random
import string
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

_NON_DIGITS = re.compile(r"\D")
_BASE36 = string.digits + string.ascii_lowercase


def generate_external_id(prefix: str = "order") -> str:
    """
    Gera o identificador externo (correlação) enviado ao gateway.

    Formato: ``order-<epoch em ms>-<sufixo aleatório base36>``. Serve apenas
    para distinguir submissões do lado do gateway; não garante idempotência.
    """
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(_BASE36, k=6))
    return f"{prefix}-{millis}-{suffix}"


def only_digits(value: Optional[str]) -> str:
    """
    Remove tudo que não for dígito (CPF/CNPJ, CEP, telefone).
    """
    return _NON_DIGITS.sub("", value or "")


def to_international_phone(value: str, country_code: str = "55") -> str:
    """
    Normaliza um telefone para o formato internacional ``+<país><número>``.
    Números que já chegam com ``+`` são mantidos, só sem a máscara.
    """
    digits = only_digits(value)
    if not digits:
        return ""
    if value.strip().startswith("+"):
        return f"+{digits}"
    return f"+{country_code}{digits}"


def to_decimal(value: Union[Decimal, float, int, str]) -> Decimal:
    """Converte para Decimal com duas casas (centavos)."""
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_document(value: str) -> str:
    """
    Aplica a máscara de CPF (até 11 dígitos) ou CNPJ (12 a 14 dígitos).
    """
    numbers = only_digits(value)[:14]
    if len(numbers) <= 11:
        numbers = re.sub(r"(\d{3})(\d)", r"\1.\2", numbers, count=1)
        numbers = re.sub(r"(\d{3})(\d)", r"\1.\2", numbers, count=1)
        return re.sub(r"(\d{3})(\d{1,2})$", r"\1-\2", numbers, count=1)
    numbers = re.sub(r"(\d{2})(\d)", r"\1.\2", numbers, count=1)
    numbers = re.sub(r"(\d{3})(\d)", r"\1.\2", numbers, count=1)
    numbers = re.sub(r"(\d{3})(\d)", r"\1/\2", numbers, count=1)
    return re.sub(r"(\d{4})(\d{1,2})$", r"\1-\2", numbers, count=1)


def format_phone(value: str) -> str:
    """Máscara ``(00) 00000-0000``."""
    numbers = only_digits(value)[:11]
    numbers = re.sub(r"(\d{2})(\d)", r"(\1) \2", numbers, count=1)
    return re.sub(r"(\d{5})(\d)", r"\1-\2", numbers, count=1)


def format_cep(value: str) -> str:
    """Máscara ``00000-000``."""
    numbers = only_digits(value)[:8]
    return re.sub(r"(\d{5})(\d)", r"\1-\2", numbers, count=1)


def format_brl(value: Union[Decimal, float, int, str]) -> str:
    """
    Formata um valor em reais no padrão pt-BR: ``R$ 1.234,56``.
    """
    amount = to_decimal(value)
    integer, cents = f"{amount:,.2f}".split(".")
    return f"R$ {integer.replace(',', '.')},{cents}"


def format_countdown(remaining: timedelta) -> str:
    """
    Formata o tempo restante como ``HH:MM:SS``; ``Expirado`` quando zerado.
    """
    if remaining.total_seconds() <= 0:
        return "Expirado"
    total = int(remaining.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Converte datas ISO-8601 do gateway (com ``Z`` ou offset) para datetime
    com fuso. Datas sem fuso são tratadas como UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
