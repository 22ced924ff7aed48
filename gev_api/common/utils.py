"""
Common utility functions shared across the application.
"""
from datetime import datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from gev_api.common.exceptions import ValidationError

CENT = Decimal("0.01")

M = TypeVar("M", bound=BaseModel)


def to_money(value: Any) -> Decimal:
    """Convert a number to a Decimal rounded to cents."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_percent(value: Optional[float]) -> float:
    """Round a percentage for display."""
    return round(float(value or 0), 2)


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten a Pydantic error into a single client-facing message."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "valor inválido")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Dados inválidos"


def parse_model(model: Type[M], data: Dict[str, Any]) -> M:
    """
    Validate raw input (e.g. form fields) against a schema.

    Raises:
        ValidationError: With a readable message if validation fails
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_error(e))


def period_start(periodo: str, now: datetime) -> Optional[datetime]:
    """
    First instant of a named reporting window ending at ``now``.

    ``hoje`` starts at midnight, ``semana`` covers the last 7 calendar days
    including today, ``mes`` starts on the 1st and ``total`` has no lower bound.

    Raises:
        ValidationError: For an unknown period name
    """
    midnight = datetime.combine(now.date(), time.min)
    if periodo == "hoje":
        return midnight
    if periodo == "semana":
        return midnight - timedelta(days=6)
    if periodo == "mes":
        return midnight.replace(day=1)
    if periodo == "total":
        return None
    raise ValidationError(f"Período inválido: {periodo}")
