from sqlalchemy.orm import Session

from .database import storage_errors
from .errors import ForbiddenError, NotFoundError, ValidationError
from .logging_config import get_logger
from .models import Customer

logger = get_logger(__name__)


def create_customer(db: Session, name, email=None) -> dict:
    if not name:
        raise ValidationError("Customer name is required")

    customer = Customer(name=name, email=email or None)
    with storage_errors(db):
        db.add(customer)
        db.commit()
        db.refresh(customer)

    logger.info("customer_created", customer_id=customer.customer_id)
    return customer.to_dict()


def list_customers(db: Session) -> list:
    with storage_errors(db):
        customers = db.query(Customer).order_by(Customer.customer_id).all()
    return [c.to_dict() for c in customers]


def get_customer(db: Session, customer_id) -> dict:
    try:
        customer_id = int(customer_id)
    except (TypeError, ValueError):
        raise NotFoundError("Customer not found")

    with storage_errors(db):
        customer = db.query(Customer).filter(Customer.customer_id == customer_id).first()
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer.to_dict()


def delete_customer(customer_id) -> None:
    # Customers are kept forever; orders keep pointing at them.
    raise ForbiddenError("Deleting customers is not allowed")
