import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ..db import get_db
from ..deps import require_roles
from ..utils import error_response
from .. import crud, models, schemas


router = APIRouter(prefix="/contracts", tags=["contracts"])
logger = logging.getLogger("contracts")

party = require_roles("client", "contractor")


@router.get("/{contract_id}", response_model=schemas.Contract)
def get_contract(contract_id: int, profile: models.Profile = Depends(party), db: Session = Depends(get_db)):
    try:
        contract = crud.get_contract(db, profile, contract_id)
    except SQLAlchemyError as e:
        logger.exception("Contract lookup failed")
        return error_response(400, str(e))
    if not contract:
        return error_response(400, "No contract found")
    return contract


@router.get("", response_model=list[schemas.Contract])
def list_contracts(profile: models.Profile = Depends(party), db: Session = Depends(get_db)):
    """Non-terminated contracts the caller is a party to."""
    try:
        return crud.list_active_contracts(db, profile)
    except SQLAlchemyError as e:
        logger.exception("Contract listing failed")
        return error_response(400, str(e))
