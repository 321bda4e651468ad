from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from marketplace import crud, models
from marketplace.utils import utcnow


@pytest.fixture()
def parties(factory):
    client_id = factory.profile(type="client", balance=500.0)
    contractor_id = factory.profile(type="contractor", balance=50.0)
    return client_id, contractor_id


class TestUnpaidJobs:
    def test_only_unpaid_jobs_of_active_owned_contracts(self, client, factory, parties, as_profile):
        client_id, contractor_id = parties
        other_client = factory.profile(type="client")
        active = factory.contract(client_id, contractor_id, status="in_progress")
        new = factory.contract(client_id, contractor_id, status="new")
        terminated = factory.contract(client_id, contractor_id, status="terminated")
        foreign = factory.contract(other_client, contractor_id, status="in_progress")

        open_job = factory.job(active, price=200.0)
        factory.job(active, price=150.0, paid=True, payment_date=datetime(2020, 8, 15))
        factory.job(new, price=10.0)
        factory.job(terminated, price=20.0)
        factory.job(foreign, price=30.0)

        response = client.get("/jobs/unpaid", headers=as_profile(client_id))
        assert response.status_code == 200
        data = response.json()
        assert [j["id"] for j in data] == [open_job]
        assert data[0]["paid"] is False
        assert data[0]["contract"]["id"] == active

    def test_contractor_view(self, client, factory, parties, as_profile):
        client_id, contractor_id = parties
        other_client = factory.profile(type="client")
        factory.job(factory.contract(client_id, contractor_id), price=1.0)
        factory.job(factory.contract(other_client, contractor_id), price=2.0)

        response = client.get("/jobs/unpaid", headers=as_profile(contractor_id))
        assert response.status_code == 200
        assert sorted(j["price"] for j in response.json()) == [1.0, 2.0]


class TestPayJob:
    def test_pay_moves_price_between_balances(self, client, factory, parties, as_profile):
        client_id, contractor_id = parties
        job_id = factory.job(factory.contract(client_id, contractor_id), price=200.0)

        response = client.post(f"/jobs/{job_id}/pay", headers=as_profile(client_id))
        assert response.status_code == 200
        assert response.json() == {"message": "Paid successfully"}

        assert factory.balance(client_id) == 300.0
        assert factory.balance(contractor_id) == 250.0
        job = factory.get(models.Job, job_id)
        assert job.paid is True
        assert job.payment_date is not None

    def test_second_payment_is_rejected(self, client, factory, parties, as_profile):
        client_id, contractor_id = parties
        job_id = factory.job(factory.contract(client_id, contractor_id), price=100.0)

        assert client.post(f"/jobs/{job_id}/pay", headers=as_profile(client_id)).status_code == 200
        response = client.post(f"/jobs/{job_id}/pay", headers=as_profile(client_id))
        assert response.status_code == 400
        assert response.json() == {"message": "Job already paid"}
        assert factory.balance(client_id) == 400.0
        assert factory.balance(contractor_id) == 150.0

    def test_insufficient_funds(self, client, factory, parties, as_profile):
        client_id, contractor_id = parties
        job_id = factory.job(factory.contract(client_id, contractor_id), price=500.01)

        response = client.post(f"/jobs/{job_id}/pay", headers=as_profile(client_id))
        assert response.status_code == 400
        assert response.json() == {"message": "Insufficient funds"}
        assert factory.balance(client_id) == 500.0
        assert factory.balance(contractor_id) == 50.0
        assert factory.get(models.Job, job_id).paid is False

    def test_exact_balance_is_enough(self, client, factory, parties, as_profile):
        client_id, contractor_id = parties
        job_id = factory.job(factory.contract(client_id, contractor_id), price=500.0)

        assert client.post(f"/jobs/{job_id}/pay", headers=as_profile(client_id)).status_code == 200
        assert factory.balance(client_id) == 0.0

    def test_job_of_another_client(self, client, factory, parties, as_profile):
        client_id, contractor_id = parties
        other_client = factory.profile(type="client", balance=1000.0)
        job_id = factory.job(factory.contract(other_client, contractor_id), price=10.0)

        response = client.post(f"/jobs/{job_id}/pay", headers=as_profile(client_id))
        assert response.status_code == 400
        assert response.json() == {"message": "No Job found"}
        assert factory.balance(other_client) == 1000.0

    def test_missing_job(self, client, parties, as_profile):
        response = client.post("/jobs/4242/pay", headers=as_profile(parties[0]))
        assert response.status_code == 400
        assert response.json() == {"message": "No Job found"}

    def test_terminated_contract_cannot_be_paid(self, client, factory, parties, as_profile):
        client_id, contractor_id = parties
        job_id = factory.job(factory.contract(client_id, contractor_id, status="terminated"), price=10.0)

        response = client.post(f"/jobs/{job_id}/pay", headers=as_profile(client_id))
        assert response.status_code == 400
        assert response.json() == {"message": "No Job found"}

    def test_contractor_cannot_pay(self, client, factory, parties, as_profile):
        client_id, contractor_id = parties
        job_id = factory.job(factory.contract(client_id, contractor_id), price=10.0)
        assert client.post(f"/jobs/{job_id}/pay", headers=as_profile(contractor_id)).status_code == 403

    def test_failure_mid_transfer_leaves_no_partial_state(self, client, factory, parties, as_profile, monkeypatch):
        client_id, contractor_id = parties
        job_id = factory.job(factory.contract(client_id, contractor_id), price=100.0)

        def broken_credit(db, profile_id, amount):
            raise OperationalError("UPDATE profiles", {}, Exception("database is locked"))

        monkeypatch.setattr(crud, "credit", broken_credit)
        response = client.post(f"/jobs/{job_id}/pay", headers=as_profile(client_id))
        assert response.status_code == 400
        assert "database is locked" in response.json()["message"]

        assert factory.balance(client_id) == 500.0
        assert factory.balance(contractor_id) == 50.0
        assert factory.get(models.Job, job_id).paid is False

    def test_non_numeric_job_id(self, client, parties, as_profile):
        response = client.post("/jobs/abc/pay", headers=as_profile(parties[0]))
        assert response.status_code == 400
        assert "job_id" in response.json()["message"]

    def test_payment_date_is_utc(self, client, factory, parties, as_profile):
        client_id, contractor_id = parties
        job_id = factory.job(factory.contract(client_id, contractor_id), price=10.0)

        before = utcnow()
        assert client.post(f"/jobs/{job_id}/pay", headers=as_profile(client_id)).status_code == 200
        paid_at = factory.get(models.Job, job_id).payment_date
        assert before - timedelta(seconds=1) <= paid_at <= utcnow() + timedelta(seconds=1)


class TestPaymentRaces:
    """Another request commits between the precheck and the transfer."""

    def test_job_paid_concurrently(self, client, factory, parties, as_profile, monkeypatch):
        client_id, contractor_id = parties
        job_id = factory.job(factory.contract(client_id, contractor_id), price=100.0)
        real_mark = crud.mark_job_paid

        def paid_elsewhere_first(db, jid):
            factory.update(models.Job, jid, paid=True, payment_date=datetime(2020, 1, 1))
            return real_mark(db, jid)

        monkeypatch.setattr(crud, "mark_job_paid", paid_elsewhere_first)
        response = client.post(f"/jobs/{job_id}/pay", headers=as_profile(client_id))
        assert response.status_code == 400
        assert response.json() == {"message": "Job already paid"}

        assert factory.balance(client_id) == 500.0
        assert factory.balance(contractor_id) == 50.0
        assert factory.get(models.Job, job_id).payment_date == datetime(2020, 1, 1)

    def test_balance_drained_concurrently(self, client, factory, parties, as_profile, monkeypatch):
        client_id, contractor_id = parties
        job_id = factory.job(factory.contract(client_id, contractor_id), price=100.0)
        real_mark = crud.mark_job_paid

        def drained_first(db, jid):
            factory.update(models.Profile, client_id, balance=10.0)
            return real_mark(db, jid)

        monkeypatch.setattr(crud, "mark_job_paid", drained_first)
        response = client.post(f"/jobs/{job_id}/pay", headers=as_profile(client_id))
        assert response.status_code == 400
        assert response.json() == {"message": "Insufficient funds"}

        assert factory.balance(client_id) == 10.0
        assert factory.balance(contractor_id) == 50.0
        job = factory.get(models.Job, job_id)
        assert job.paid is False
        assert job.payment_date is None
