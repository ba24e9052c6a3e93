from sqlalchemy import func
from sqlalchemy.orm import Session

from . import ledger
from .database import storage_errors
from .models import Order
from .orders import recent_orders


def order_totals(db: Session) -> dict:
    """Order counts per status plus an ALL total."""
    with storage_errors(db):
        rows = db.query(Order.status, func.count(Order.order_id)).group_by(Order.status).all()
    totals = {status: count for status, count in rows}
    totals["ALL"] = sum(count for _, count in rows)
    return totals


def compute_stats(db: Session) -> dict:
    """Dashboard rollup, recomputed on every call."""
    return {
        "totals": order_totals(db),
        "settled_total": ledger.settled_total(db),
        "recentOrders": recent_orders(db),
    }
