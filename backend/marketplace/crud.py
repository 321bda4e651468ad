from datetime import datetime
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_, func, select, update
from . import models
from .utils import utcnow


def owner_filter(profile: models.Profile):
    """Restrict contracts to the ones the actor is a party to."""
    if profile.type == "client":
        return models.Contract.client_id == profile.id
    return models.Contract.contractor_id == profile.id


def get_contract(db: Session, profile: models.Profile, contract_id: int) -> models.Contract | None:
    stmt = select(models.Contract).where(models.Contract.id == contract_id, owner_filter(profile))
    return db.scalar(stmt)


def list_active_contracts(db: Session, profile: models.Profile) -> list[models.Contract]:
    stmt = select(models.Contract).where(
        models.Contract.status != "terminated",
        owner_filter(profile),
    )
    return list(db.scalars(stmt).all())


def list_unpaid_jobs(db: Session, profile: models.Profile) -> list[models.Job]:
    stmt = (
        select(models.Job)
        .join(models.Job.contract)
        .options(joinedload(models.Job.contract))
        .where(
            models.Job.paid.is_not(True),
            models.Contract.status == "in_progress",
            owner_filter(profile),
        )
    )
    return list(db.scalars(stmt).all())


def get_payable_job(db: Session, client: models.Profile, job_id: int) -> models.Job | None:
    stmt = (
        select(models.Job)
        .join(models.Job.contract)
        .options(joinedload(models.Job.contract))
        .where(
            models.Job.id == job_id,
            models.Contract.client_id == client.id,
            models.Contract.status == "in_progress",
        )
    )
    return db.scalar(stmt)


def list_depositable_jobs(db: Session, client: models.Profile, contractor_id: int) -> list[models.Job]:
    stmt = (
        select(models.Job)
        .join(models.Job.contract)
        .options(joinedload(models.Job.contract))
        .where(
            models.Job.paid.is_not(True),
            models.Job.deposit_paid.is_not(True),
            models.Contract.client_id == client.id,
            models.Contract.contractor_id == contractor_id,
            models.Contract.status != "terminated",
        )
        .order_by(models.Job.id)
    )
    return list(db.scalars(stmt).all())


# Conditional updates: each returns True only when the guarded row changed.

def mark_job_paid(db: Session, job_id: int) -> bool:
    stmt = (
        update(models.Job)
        .where(models.Job.id == job_id, models.Job.paid.is_not(True))
        .values(paid=True, payment_date=utcnow())
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount == 1


def mark_deposit_paid(db: Session, job_id: int) -> bool:
    stmt = (
        update(models.Job)
        .where(
            models.Job.id == job_id,
            models.Job.paid.is_not(True),
            models.Job.deposit_paid.is_not(True),
        )
        .values(deposit_paid=True)
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount == 1


def debit(db: Session, profile_id: int, amount: float) -> bool:
    stmt = (
        update(models.Profile)
        .where(models.Profile.id == profile_id, models.Profile.balance >= amount)
        .values(balance=models.Profile.balance - amount)
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount == 1


def credit(db: Session, profile_id: int, amount: float) -> bool:
    stmt = (
        update(models.Profile)
        .where(models.Profile.id == profile_id)
        .values(balance=models.Profile.balance + amount)
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount == 1


def _paid_between(start: datetime, end: datetime):
    return and_(
        models.Job.paid.is_(True),
        models.Job.payment_date >= start,
        models.Job.payment_date < end,
    )


def best_profession(db: Session, start: datetime, end: datetime) -> str | None:
    """Profession whose contractors earned the most from jobs paid in [start, end)."""
    total = func.sum(models.Job.price).label("total")
    stmt = (
        select(models.Profile.profession, total)
        .select_from(models.Job)
        .join(models.Contract, models.Job.contract_id == models.Contract.id)
        .join(models.Profile, models.Contract.contractor_id == models.Profile.id)
        .where(_paid_between(start, end))
        .group_by(models.Profile.profession)
        .order_by(total.desc())
        .limit(1)
    )
    row = db.execute(stmt).first()
    return row.profession if row else None


def best_clients(db: Session, start: datetime, end: datetime, limit: int) -> list[dict]:
    total = func.sum(models.Job.price).label("total")
    stmt = (
        select(models.Profile.id, models.Profile.first_name, models.Profile.last_name, total)
        .select_from(models.Job)
        .join(models.Contract, models.Job.contract_id == models.Contract.id)
        .join(models.Profile, models.Contract.client_id == models.Profile.id)
        .where(_paid_between(start, end))
        .group_by(models.Profile.id, models.Profile.first_name, models.Profile.last_name)
        .order_by(total.desc(), models.Profile.id)
        .limit(limit)
    )
    return [
        {"id": r.id, "full_name": f"{r.first_name} {r.last_name}", "paid": float(r.total)}
        for r in db.execute(stmt).all()
    ]
