from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.types import TypeDecorator

from .database import Base  # Import the Base class from our database setup

# Order lifecycle states.
AUTHORIZED = "AUTHORIZED"
DECLINED = "DECLINED"
ERROR = "ERROR"
SETTLED = "SETTLED"
ORDER_STATUSES = (AUTHORIZED, DECLINED, ERROR, SETTLED)


def utcnow() -> datetime:
    # Stored naive, in UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _isoformat(value):
    return value.isoformat() if value is not None else None


def _as_number(value):
    if value is None or isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return value


class Amount(TypeDecorator):
    """
    Money column that keeps whatever the caller sent.

    Numbers and numeric strings are stored as floats; anything else is handed
    to the driver unchanged, so SQLite keeps it as text and it reads back as
    it was written. Engines with strict column types reject it at write time.
    """
    impl = Float
    cache_ok = True

    def bind_processor(self, dialect):
        return _as_number

    def result_processor(self, dialect, coltype):
        return _as_number


# A customer who places orders. Rows are never deleted.
class Customer(Base):
    __tablename__ = "customers"

    customer_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)

    def to_dict(self):
        return {"customer_id": self.customer_id, "name": self.name, "email": self.email}


# An order keyed by the caller's own order_id; checkout replaces it in place.
class Order(Base):
    __tablename__ = "orders"

    order_id = Column(String, primary_key=True)  # Business-level order identifier.
    # Declared for documentation only; SQLite does not enforce it unless asked to.
    customer_id = Column(Integer, ForeignKey("customers.customer_id"))
    order_amount = Column(Amount)
    status = Column(String, index=True)  # One of ORDER_STATUSES.
    order_date = Column(DateTime, default=utcnow, index=True)

    def to_dict(self):
        return {
            "order_id": self.order_id,
            "customer_id": self.customer_id,
            "order_amount": self.order_amount,
            "status": self.status,
            "order_date": _isoformat(self.order_date),
        }


# One simulated gateway decision for an order. Append-only.
class Authorization(Base):
    __tablename__ = "authorizations"

    auth_id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String, index=True)
    response_id = Column(String)  # SUCCESS, INSUFFICIENT_FUNDS or SERVER_ERROR.
    auth_amount = Column(Amount)
    last_4 = Column(String, default="0000")
    audit_date = Column(DateTime, default=utcnow)

    def to_dict(self):
        return {
            "auth_id": self.auth_id,
            "order_id": self.order_id,
            "response_id": self.response_id,
            "auth_amount": self.auth_amount,
            "last_4": self.last_4,
            "audit_date": _isoformat(self.audit_date),
        }


# Capture of funds for an authorized order. Append-only.
class Settlement(Base):
    __tablename__ = "settlements"

    settlement_id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String, index=True)
    auth_id = Column(Integer, ForeignKey("authorizations.auth_id"), nullable=True)
    settled_amount = Column(Amount)
    settlement_status = Column(String, default=SETTLED)
    settlement_date = Column(DateTime, default=utcnow)

    def to_dict(self):
        return {
            "settlement_id": self.settlement_id,
            "order_id": self.order_id,
            "auth_id": self.auth_id,
            "settled_amount": self.settled_amount,
            "settlement_status": self.settlement_status,
            "settlement_date": _isoformat(self.settlement_date),
        }
