import argparse
import logging
from datetime import datetime
from .db import Base, SessionLocal, engine
from . import models

"""
Load a fixed sample marketplace into the configured database:
- clients and contractors with starting balances, plus one admin
- contracts in every status
- paid jobs spread over 2020 (for the admin reports) and unpaid jobs
Usage: python -m marketplace.seed [--reset]
"""

logger = logging.getLogger("seed")

PROFILES = [
    # id, first, last, profession, balance, type
    (1, "Ada", "Lovelace", "Mathematician", 1150.0, "client"),
    (2, "Grace", "Hopper", "Admiral", 231.11, "client"),
    (3, "Alan", "Turing", "Cryptanalyst", 451.3, "client"),
    (4, "Edsger", "Dijkstra", "Pilot", 1.3, "client"),
    (5, "Linus", "Torvalds", "Programmer", 64.0, "contractor"),
    (6, "Margaret", "Hamilton", "Programmer", 1214.0, "contractor"),
    (7, "Donald", "Knuth", "Typesetter", 22.0, "contractor"),
    (8, "Barbara", "Liskov", "Fighter", 314.0, "contractor"),
    (9, "Ken", "Thompson", "Admin", 0.0, "admin"),
]

CONTRACTS = [
    # id, terms, status, client_id, contractor_id
    (1, "bla bla bla", "terminated", 1, 5),
    (2, "bla bla bla", "in_progress", 1, 6),
    (3, "bla bla bla", "in_progress", 2, 6),
    (4, "bla bla bla", "in_progress", 2, 7),
    (5, "bla bla bla", "new", 3, 8),
    (6, "bla bla bla", "in_progress", 3, 7),
    (7, "bla bla bla", "in_progress", 4, 7),
    (8, "bla bla bla", "in_progress", 4, 6),
    (9, "bla bla bla", "in_progress", 4, 8),
]

JOBS = [
    # description, price, contract_id, payment_date (None when unpaid)
    ("work", 200.0, 1, None),
    ("work", 201.0, 2, None),
    ("work", 202.0, 3, None),
    ("work", 200.0, 4, None),
    ("work", 200.0, 7, None),
    ("work", 2020.0, 7, datetime(2020, 8, 15, 19, 11, 26)),
    ("work", 200.0, 2, datetime(2020, 8, 15, 19, 11, 26)),
    ("work", 200.0, 3, datetime(2020, 8, 16, 19, 11, 26)),
    ("work", 200.0, 1, datetime(2020, 8, 17, 19, 11, 26)),
    ("work", 200.0, 5, datetime(2020, 8, 17, 19, 11, 26)),
    ("work", 21.0, 1, datetime(2020, 8, 10, 19, 11, 26)),
    ("work", 21.0, 2, datetime(2020, 8, 15, 19, 11, 26)),
    ("work", 121.0, 3, datetime(2020, 8, 15, 19, 11, 26)),
    ("work", 121.0, 3, datetime(2020, 8, 14, 23, 11, 26)),
]


def seed(reset: bool = False) -> int:
    if reset:
        logger.info("Dropping all tables...")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        for pid, first, last, profession, balance, ptype in PROFILES:
            db.merge(models.Profile(
                id=pid, first_name=first, last_name=last,
                profession=profession, balance=balance, type=ptype,
            ))
        for cid, terms, status, client_id, contractor_id in CONTRACTS:
            db.merge(models.Contract(
                id=cid, terms=terms, status=status,
                client_id=client_id, contractor_id=contractor_id,
            ))
        for jid, (description, price, contract_id, paid_at) in enumerate(JOBS, start=1):
            db.merge(models.Job(
                id=jid, description=description, price=price, contract_id=contract_id,
                paid=paid_at is not None, payment_date=paid_at, deposit_paid=False,
            ))
        db.commit()
    finally:
        db.close()
    logger.info("Seeded %d profiles, %d contracts, %d jobs", len(PROFILES), len(CONTRACTS), len(JOBS))
    return len(PROFILES) + len(CONTRACTS) + len(JOBS)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    ap = argparse.ArgumentParser(description="Seed the marketplace database with sample data")
    ap.add_argument('--reset', action='store_true', help='drop existing tables first')
    args = ap.parse_args()
    seed(reset=args.reset)
