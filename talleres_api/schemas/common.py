from datetime import datetime, timezone
from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normaliza fechas con zona horaria a UTC; las ingenuas se asumen UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(to_utc)]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def no_nulo(value):
    """Para actualizaciones parciales: el campo puede omitirse, pero no enviarse como null."""
    if value is None:
        raise ValueError("no puede ser nulo")
    return value
