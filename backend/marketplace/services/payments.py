from __future__ import annotations

import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..db import atomic

logger = logging.getLogger("payments")

DEPOSIT_RATE = 0.25


class PaymentError(Exception):
    """A money movement was refused; the message is safe to show the caller."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class JobNotFound(PaymentError):
    pass


class JobAlreadyPaid(PaymentError):
    pass


class InsufficientFunds(PaymentError):
    pass


class NoJobsToPay(PaymentError):
    pass


class DepositInterrupted(PaymentError):
    """A deposit transfer failed after `summary` jobs were already committed."""

    def __init__(self, message: str, summary: schemas.DepositSummary):
        super().__init__(message)
        self.summary = summary


def pay_job(db: Session, client: models.Profile, job_id: int) -> None:
    job = crud.get_payable_job(db, client, job_id)
    if job is None:
        raise JobNotFound("No Job found")
    if job.paid:
        raise JobAlreadyPaid("Job already paid")
    if job.price > client.balance:
        logger.info("Client %s cannot cover job %s (%.2f > %.2f)", client.id, job.id, job.price, client.balance)
        raise InsufficientFunds("Insufficient funds")

    price = job.price
    contractor_id = job.contract.contractor_id
    with atomic(db):
        if not crud.mark_job_paid(db, job_id):
            raise JobAlreadyPaid("Job already paid")
        if not crud.debit(db, client.id, price):
            raise InsufficientFunds("Insufficient funds")
        crud.credit(db, contractor_id, price)
    logger.info("Job %s paid: %.2f from client %s to contractor %s", job_id, price, client.id, contractor_id)


def deposit(db: Session, client: models.Profile, contractor_id: int) -> schemas.DepositSummary:
    """Advance DEPOSIT_RATE of each open job's price to the contractor.

    Jobs are visited in id order against the client's current balance, so once
    funds run short the remaining jobs are skipped. Each job's transfer commits
    on its own.
    """
    jobs = crud.list_depositable_jobs(db, client, contractor_id)
    if not jobs:
        raise NoJobsToPay("No Jobs to pay")

    summary = schemas.DepositSummary(jobs=len(jobs))
    # instances expire on every commit below
    pending = [(job.id, job.price) for job in jobs]
    for job_id, price in pending:
        amount = DEPOSIT_RATE * price
        if amount > client.balance:
            logger.info("Skipping deposit for job %s: %.2f exceeds balance %.2f", job_id, amount, client.balance)
            continue
        try:
            with atomic(db):
                if not crud.mark_deposit_paid(db, job_id):
                    continue
                if not crud.debit(db, client.id, amount):
                    raise InsufficientFunds("Insufficient funds")
                crud.credit(db, contractor_id, amount)
        except (PaymentError, SQLAlchemyError) as exc:
            logger.error("Deposit for job %s failed after %d transfers: %s", job_id, summary.total_jobs_paid, exc)
            summary.message = getattr(exc, "message", str(exc))
            raise DepositInterrupted(summary.message, summary) from exc
        summary.paid += amount
        summary.total_jobs_paid += 1
        logger.info("Deposit %.2f for job %s to contractor %s", amount, job_id, contractor_id)
    return summary
