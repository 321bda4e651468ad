import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ..db import get_db
from ..deps import require_roles
from ..services.payments import DepositInterrupted, PaymentError, deposit
from ..utils import error_response
from .. import models, schemas


router = APIRouter(prefix="/balances", tags=["balances"])
logger = logging.getLogger("balances")


@router.post("/deposit/{user_id}", response_model=schemas.DepositSummary)
def deposit_for_contractor(
    user_id: int,
    client: models.Profile = Depends(require_roles("client")),
    db: Session = Depends(get_db),
):
    """Pay a 25% advance on the caller's open jobs with contractor `user_id`."""
    try:
        return deposit(db, client, user_id)
    except DepositInterrupted as e:
        # earlier transfers stay committed; report them with the failure
        return JSONResponse(status_code=400, content=e.summary.model_dump(by_alias=True))
    except PaymentError as e:
        return error_response(e.status_code, e.message)
    except SQLAlchemyError as e:
        logger.exception("Deposit query failed")
        return error_response(400, str(e))
