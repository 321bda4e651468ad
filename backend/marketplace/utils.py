import re
from datetime import datetime, timezone

from fastapi import Response
from fastapi.responses import JSONResponse

DATE_FORMAT = "%m-%d-%Y"
DATE_PATTERN = re.compile(r"^\d{2}-\d{2}-\d{4}$")
INVALID_DATES_MESSAGE = "Invalid dates, please use the format MM-DD-YYYY"


def matches_date_format(value: str | None) -> bool:
    return bool(value) and DATE_PATTERN.match(value) is not None


def parse_date(value: str | None) -> datetime | None:
    """Strict MM-DD-YYYY parse; impossible calendar dates give None."""
    if not matches_date_format(value):
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return None


def validate_date(value: str | None) -> bool:
    return parse_date(value) is not None


def utcnow() -> datetime:
    """Naive UTC timestamp; every stored and reported time uses this base."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def error_response(status_code: int, message: str | None = None) -> Response:
    if message is None:
        return Response(status_code=status_code)
    return JSONResponse(status_code=status_code, content={"message": message})
