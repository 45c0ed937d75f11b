# ==============================================================================
# UTILIDADES DE FECHAS
# ==============================================================================
# Internamente todas las fechas son datetime con tz UTC.
# - datetime sin tz → se asume UTC
# - date → inicio o fin del día según el extremo del rango
#
# El formato de almacenamiento es fijo (microsegundos siempre presentes) para
# que la comparación de strings coincida con la comparación cronológica.
# ==============================================================================

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple, Union

DateLike = Union[datetime, date, str]

STORAGE_FORMAT = '%Y-%m-%dT%H:%M:%S.%fZ'


def utc_now() -> datetime:
    """Hora actual en UTC (reloj por defecto del ledger)."""
    return datetime.now(timezone.utc)


def to_utc(value: DateLike, end_of_range: bool = False) -> datetime:
    """
    Normaliza una fecha a datetime UTC.

    Args:
        value: datetime, date o string ISO
        end_of_range: Si es un date, usar 23:59:59.999999 en vez de 00:00

    Raises:
        ValueError: Si el string no es una fecha ISO válida
        TypeError: Si el tipo no es soportado
    """
    if isinstance(value, str):
        value = value.strip()
        # 'YYYY-MM-DD' se trata como día completo
        value = date.fromisoformat(value) if len(value) == 10 else parse_timestamp(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        bound = time.max if end_of_range else time.min
        return datetime.combine(value, bound, tzinfo=timezone.utc)
    raise TypeError(f'Fecha no soportada: {value!r}')


def format_timestamp(value: DateLike) -> str:
    """Serializa una fecha al formato de almacenamiento."""
    return to_utc(value).strftime(STORAGE_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """
    Parsea un timestamp almacenado o ISO 8601.

    Raises:
        ValueError: Si no se puede interpretar
    """
    try:
        return datetime.strptime(value, STORAGE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        pass
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    return to_utc(parsed)


def normalize_range(start: DateLike, end: DateLike) -> Tuple[datetime, datetime]:
    """Rango inclusivo [start, end] en UTC."""
    return to_utc(start), to_utc(end, end_of_range=True)


# =========================================================================
# RANGOS DE PERÍODOS
# =========================================================================

def start_of_day(value: Optional[datetime] = None) -> datetime:
    value = to_utc(value or utc_now())
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: Optional[datetime] = None) -> datetime:
    return start_of_day(value) + timedelta(days=1, microseconds=-1)


def start_of_week(value: Optional[datetime] = None) -> datetime:
    """Lunes 00:00 de la semana."""
    day = start_of_day(value)
    return day - timedelta(days=day.weekday())


def start_of_month(value: Optional[datetime] = None) -> datetime:
    return start_of_day(value).replace(day=1)


def start_of_previous_month(value: Optional[datetime] = None) -> datetime:
    first = start_of_month(value)
    if first.month == 1:
        return first.replace(year=first.year - 1, month=12)
    return first.replace(month=first.month - 1)


def days_between(start: datetime, end: datetime) -> int:
    """Cantidad de días calendario cubiertos por el rango (mínimo 1)."""
    return max(1, (to_utc(end).date() - to_utc(start).date()).days + 1)
