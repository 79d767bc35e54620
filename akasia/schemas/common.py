from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict


def _naive_utc(value: datetime) -> datetime:
    # Stored datetimes are naive UTC
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


NaiveDatetime = Annotated[datetime, AfterValidator(_naive_utc)]


def min_length(length: int, message: str):
    def check(value: str) -> str:
        value = value.strip()
        if len(value) < length:
            raise ValueError(message)
        return value
    return AfterValidator(check)


def positive(message: str):
    def check(value):
        if value <= 0:
            raise ValueError(message)
        return value
    return AfterValidator(check)


def at_least(minimum, message: str):
    def check(value):
        if value < minimum:
            raise ValueError(message)
        return value
    return AfterValidator(check)


def not_empty_list(message: str):
    def check(value: list) -> list:
        if not value:
            raise ValueError(message)
        return value
    return AfterValidator(check)


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


OptionalText = Annotated[Optional[str], AfterValidator(optional_text)]


class RequestSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra='ignore')
