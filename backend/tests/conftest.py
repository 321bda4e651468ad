"""
Pytest fixtures: in-memory SQLite database, FastAPI test client and
small factories for profiles, contracts and jobs.
"""
import os
from datetime import datetime

# Keep the app's own engine off the filesystem
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.db import Base, get_db
from marketplace.main import app
from marketplace import models


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class Factory:
    """Writes rows through a short-lived session and hands back their ids."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def _add(self, obj) -> int:
        db = self.session_factory()
        try:
            db.add(obj)
            db.commit()
            return obj.id
        finally:
            db.close()

    def profile(self, type="client", balance=100.0, profession="Programmer", first_name="John", last_name="Doe") -> int:
        return self._add(models.Profile(
            first_name=first_name, last_name=last_name,
            profession=profession, balance=balance, type=type,
        ))

    def contract(self, client_id: int, contractor_id: int, status="in_progress") -> int:
        return self._add(models.Contract(
            terms="bla bla bla", status=status,
            client_id=client_id, contractor_id=contractor_id,
        ))

    def job(self, contract_id: int, price=100.0, paid=False, payment_date: datetime | None = None, deposit_paid=False) -> int:
        return self._add(models.Job(
            description="work", price=price, contract_id=contract_id,
            paid=paid, payment_date=payment_date, deposit_paid=deposit_paid,
        ))

    def get(self, model, pk):
        db = self.session_factory()
        try:
            return db.get(model, pk)
        finally:
            db.close()

    def update(self, model, pk, **values):
        """Commit a change from a separate session, as another request would."""
        db = self.session_factory()
        try:
            obj = db.get(model, pk)
            for key, value in values.items():
                setattr(obj, key, value)
            db.commit()
        finally:
            db.close()

    def balance(self, profile_id: int) -> float:
        return self.get(models.Profile, profile_id).balance


@pytest.fixture()
def factory(session_factory):
    return Factory(session_factory)


@pytest.fixture()
def as_profile():
    def headers(profile_id: int) -> dict:
        return {"profile_id": str(profile_id)}
    return headers
