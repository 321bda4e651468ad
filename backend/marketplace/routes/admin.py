import logging
from datetime import timedelta
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ..config import settings
from ..db import get_db
from ..deps import require_roles
from ..utils import INVALID_DATES_MESSAGE, error_response, matches_date_format, parse_date, validate_date
from .. import crud, schemas


router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_roles("admin"))])
logger = logging.getLogger("admin")


def _day_range(start: str, end: str):
    """Both bounds are whole UTC days: [start 00:00, day after end 00:00)."""
    return parse_date(start), parse_date(end) + timedelta(days=1)


@router.get("/best-profession", response_model=schemas.BestProfession)
def best_profession(start: str | None = None, end: str | None = None, db: Session = Depends(get_db)):
    if not start or not end:
        return error_response(404)
    if not matches_date_format(start) or not matches_date_format(end):
        return error_response(400, INVALID_DATES_MESSAGE)
    if not validate_date(start) or not validate_date(end):
        return error_response(404)
    lo, hi = _day_range(start, end)
    try:
        profession = crud.best_profession(db, lo, hi)
    except SQLAlchemyError as e:
        logger.exception("Best profession query failed")
        return error_response(400, str(e))
    if profession is None:
        return error_response(404)
    return schemas.BestProfession(profession=profession)


@router.get("/best-clients", response_model=list[schemas.BestClient])
def best_clients(
    start: str | None = None,
    end: str | None = None,
    limit: int | None = None,
    db: Session = Depends(get_db),
):
    if not start or not end:
        return error_response(400, "Start / end dates required")
    if not validate_date(start) or not validate_date(end):
        return error_response(400, INVALID_DATES_MESSAGE)
    lo, hi = _day_range(start, end)
    if limit is None:
        limit = settings.best_clients_default_limit
    if limit < 1:
        return error_response(400, "Limit must be a positive integer")
    try:
        rows = crud.best_clients(db, lo, hi, limit)
    except SQLAlchemyError as e:
        logger.exception("Best clients query failed")
        return error_response(400, str(e))
    return [schemas.BestClient(**r) for r in rows]
