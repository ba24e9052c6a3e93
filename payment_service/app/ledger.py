"""
Authorization and settlement ledgers.

Both are append-only audit trails: rows are inserted and read, never updated
or deleted. The "latest" row for an order is the one with the newest timestamp,
ties broken by the higher id.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session

from .database import storage_errors
from .models import SETTLED, Authorization, Settlement

DEFAULT_LAST_4 = "0000"


def append_authorization(db: Session, order_id: str, response_id: str, amount, last_4=None) -> Authorization:
    auth = Authorization(
        order_id=order_id,
        response_id=response_id,
        auth_amount=amount,
        last_4=last_4 or DEFAULT_LAST_4,
    )
    with storage_errors(db):
        db.add(auth)
        db.commit()
        db.refresh(auth)
    return auth


def latest_authorization(db: Session, order_id: str):
    with storage_errors(db):
        return (
            db.query(Authorization)
            .filter(Authorization.order_id == order_id)
            .order_by(Authorization.audit_date.desc(), Authorization.auth_id.desc())
            .first()
        )


def append_settlement(db: Session, order_id: str, auth_id, amount) -> Settlement:
    settlement = Settlement(
        order_id=order_id,
        auth_id=auth_id,
        settled_amount=amount,
        settlement_status=SETTLED,
    )
    with storage_errors(db):
        db.add(settlement)
        db.commit()
        db.refresh(settlement)
    return settlement


def latest_settlement(db: Session, order_id: str):
    with storage_errors(db):
        return (
            db.query(Settlement)
            .filter(Settlement.order_id == order_id)
            .order_by(Settlement.settlement_date.desc(), Settlement.settlement_id.desc())
            .first()
        )


def settled_total(db: Session):
    """Sum of every settled amount; 0 for an empty ledger."""
    with storage_errors(db):
        total = db.query(func.sum(Settlement.settled_amount)).scalar()
    return total or 0
