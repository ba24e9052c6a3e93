"""
Order store and lifecycle.

Checkout assigns an order its initial state from the simulated gateway
result; Settle is the only transition out of AUTHORIZED and ends in SETTLED.
DECLINED and ERROR orders stay where they are until checkout runs again for
the same order_id, which replaces the order row.
"""
import re
from typing import Callable, Optional

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from . import ledger
from .database import storage_errors
from .errors import InvalidStateError, NotFoundError, StorageError, ValidationError
from .logging_config import get_logger
from .models import AUTHORIZED, DECLINED, ERROR, SETTLED, Order, utcnow
from .simulator import INSUFFICIENT_FUNDS, SERVER_ERROR, SUCCESS, pick_outcome

logger = get_logger(__name__)

DEFAULT_LIMIT = 100
DEFAULT_OFFSET = 0
RECENT_ORDERS = 5
LEADING_INT = re.compile(r"\s*([+-]?\d+)")

# Dialects with an atomic INSERT .. ON CONFLICT DO UPDATE.
UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}

# Gateway result -> initial order state.
STATUS_FOR_OUTCOME = {
    SUCCESS: AUTHORIZED,
    INSUFFICIENT_FUNDS: DECLINED,
    SERVER_ERROR: ERROR,
}


def get_order(db: Session, order_id: str) -> Optional[Order]:
    with storage_errors(db):
        return db.query(Order).filter(Order.order_id == order_id).first()


def upsert_order(db: Session, order_id: str, customer_id, amount, status: str) -> Order:
    """Insert the order or replace every field of the existing row with the same order_id, in one statement."""
    dialect = db.get_bind().dialect.name
    insert = UPSERT_INSERTS.get(dialect)
    if insert is None:
        raise StorageError(f"Order upsert is not supported on {dialect}")

    values = {
        "order_id": order_id,
        "customer_id": customer_id,
        "order_amount": amount,
        "status": status,
        "order_date": utcnow(),
    }
    stmt = insert(Order).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Order.order_id],
        set_={column: stmt.excluded[column] for column in values if column != "order_id"},
    )
    with storage_errors(db):
        db.execute(stmt)
        db.commit()
        return db.get(Order, order_id)


def checkout(
    db: Session,
    order_id,
    customer_id,
    amount,
    last_4=None,
    outcome: Optional[Callable[[], str]] = None,
) -> dict:
    if not order_id or not customer_id or not amount:
        raise ValidationError("Missing fields")

    result = (outcome or pick_outcome)()
    status = STATUS_FOR_OUTCOME[result]

    # Two separate commits: the order can be written without its authorization row
    # if the second write fails.
    upsert_order(db, order_id, customer_id, amount, status)
    ledger.append_authorization(db, order_id, result, amount, last_4)

    logger.info("order_checked_out", order_id=order_id, result=result, status=status)
    return {"orderId": order_id, "result": result, "status": status}


def settle(db: Session, order_id, amount) -> dict:
    if not order_id or not amount:
        raise ValidationError("Missing fields")

    order = get_order(db, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    if order.status != AUTHORIZED:
        raise InvalidStateError("Order not authorized, cannot settle")

    auth = ledger.latest_authorization(db, order_id)
    settlement = ledger.append_settlement(db, order_id, auth.auth_id if auth else None, amount)

    with storage_errors(db):
        order.status = SETTLED
        db.commit()

    logger.info(
        "order_settled",
        order_id=order_id,
        settlement_id=settlement.settlement_id,
        auth_id=settlement.auth_id,
    )
    return {"orderId": order_id, "paymentStatus": SETTLED}


def order_detail(db: Session, order_id: str) -> dict:
    order = get_order(db, order_id)
    if order is None:
        raise NotFoundError("Order not found")

    auth = ledger.latest_authorization(db, order_id)
    settlement = ledger.latest_settlement(db, order_id)
    return {
        "order": order.to_dict(),
        "lastAuthorization": auth.to_dict() if auth else None,
        "lastSettlement": settlement.to_dict() if settlement else None,
    }


def parse_int(value, default: int) -> int:
    """
    Lenient query parsing: reads the leading integer ("12abc" is 12).

    Missing, unparseable and zero values fall back to the default; negative
    values are passed through to the database as given.
    """
    match = LEADING_INT.match(str(value)) if value is not None else None
    if match is None:
        return default
    return int(match.group(1)) or default


def effective_min_amount(policy: Optional[float], requested=None) -> Optional[float]:
    """Combine the configured amount floor with a caller-supplied one; the caller may only raise it."""
    try:
        requested = float(requested) if requested not in (None, "") else None
    except (TypeError, ValueError):
        requested = None
    floors = [floor for floor in (policy, requested) if floor is not None]
    return max(floors) if floors else None


def list_orders(db: Session, limit=DEFAULT_LIMIT, offset=DEFAULT_OFFSET, min_amount: Optional[float] = None):
    query = db.query(Order)
    if min_amount is not None:
        query = query.filter(Order.order_amount >= min_amount)
    with storage_errors(db):
        orders = (
            query.order_by(Order.order_date.desc(), Order.order_id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )
    return [o.to_dict() for o in orders]


def recent_orders(db: Session, count: int = RECENT_ORDERS):
    return list_orders(db, limit=count, offset=0)
