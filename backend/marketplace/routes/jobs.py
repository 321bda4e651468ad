import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ..db import get_db
from ..deps import require_roles
from ..services.payments import PaymentError, pay_job
from ..utils import error_response
from .. import crud, models, schemas


router = APIRouter(prefix="/jobs", tags=["jobs"])
logger = logging.getLogger("jobs")


@router.get("/unpaid", response_model=list[schemas.JobWithContract])
def list_unpaid(profile: models.Profile = Depends(require_roles("client", "contractor")), db: Session = Depends(get_db)):
    try:
        return crud.list_unpaid_jobs(db, profile)
    except SQLAlchemyError as e:
        logger.exception("Unpaid jobs query failed")
        return error_response(400, str(e))


@router.post("/{job_id}/pay", response_model=schemas.Message)
def pay(job_id: int, client: models.Profile = Depends(require_roles("client")), db: Session = Depends(get_db)):
    try:
        pay_job(db, client, job_id)
    except PaymentError as e:
        return error_response(e.status_code, e.message)
    except SQLAlchemyError as e:
        logger.exception("Payment for job %s failed", job_id)
        return error_response(400, str(e))
    return schemas.Message(message="Paid successfully")
