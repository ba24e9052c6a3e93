# --- Imports ---
from asyncio import sleep
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from . import customers, gateway, orders, stats
from .config import Settings, get_settings
from .database import get_db, init_db, make_engine, make_session_factory, ping
from .errors import PaymentAPIError, StorageError
from .logging_config import get_logger, setup_logging
from .schemas import AuthorizeRequest, CheckoutRequest, CustomerRequest, SettleRequest
from .simulator import INCORRECT_CARD, INSUFFICIENT_FUNDS, SERVER_ERROR, SUCCESS

logger = get_logger(__name__)


# --- Customer endpoints ---
def customer_delete_router() -> APIRouter:
    """Mounted in every profile: deleting a customer is always refused."""
    router = APIRouter()

    @router.delete("/customers/{customer_id}")
    def delete_customer(customer_id: str):
        customers.delete_customer(customer_id)

    return router


def customer_router() -> APIRouter:
    router = APIRouter()

    @router.post("/customers", status_code=201)
    def create_customer(req: CustomerRequest, db: Session = Depends(get_db)):
        return customers.create_customer(db, req.name, req.email)

    @router.get("/customers")
    def list_customers(db: Session = Depends(get_db)):
        return customers.list_customers(db)

    @router.get("/customers/{customer_id}")
    def get_customer(customer_id: str, db: Session = Depends(get_db)):
        return customers.get_customer(db, customer_id)

    return router


# --- Orders, payments and stats ---
def order_router(settings: Settings) -> APIRouter:
    router = APIRouter()

    @router.get("/orders")
    def list_orders(
        limit: Optional[str] = None,
        offset: Optional[str] = None,
        minAmount: Optional[str] = None,
        db: Session = Depends(get_db),
    ):
        """Orders newest first; the configured amount floor always applies."""
        return orders.list_orders(
            db,
            limit=orders.parse_int(limit, orders.DEFAULT_LIMIT),
            offset=orders.parse_int(offset, orders.DEFAULT_OFFSET),
            min_amount=orders.effective_min_amount(settings.order_list_min_amount, minAmount),
        )

    # Declared before /orders/{order_id} so "checkout" is not read as an id.
    @router.post("/orders/checkout")
    def checkout(req: CheckoutRequest, db: Session = Depends(get_db)):
        return orders.checkout(db, req.orderId, req.customerId, req.amount, req.last4)

    @router.get("/orders/{order_id}")
    def get_order(order_id: str, db: Session = Depends(get_db)):
        return orders.order_detail(db, order_id)

    @router.post("/payments/settle")
    def settle(req: SettleRequest, db: Session = Depends(get_db)):
        return orders.settle(db, req.orderId, req.amount)

    @router.get("/stats")
    def get_stats(db: Session = Depends(get_db)):
        return stats.compute_stats(db)

    return router


# --- Mock gateway ---
def gateway_router(settings: Settings) -> APIRouter:
    router = APIRouter()

    @router.post("/authorize")
    def authorize(req: Optional[AuthorizeRequest] = None):
        req = req or AuthorizeRequest()
        status_code, body = gateway.authorize(req.OrderId, req.RequestedAmount)
        return JSONResponse(status_code=status_code, content=body)

    @router.post("/external-authorize")
    def external_authorize(payload: Any = Body(None)):
        status_code, body, is_json = gateway.forward_authorization(
            payload, settings.external_authorize_url, settings.external_authorize_timeout
        )
        if is_json:
            return JSONResponse(status_code=status_code, content=body)
        return PlainTextResponse(status_code=status_code, content=body)

    @router.get("/success")
    def success():
        return gateway.template(SUCCESS)

    @router.get("/incorrect-card")
    def incorrect_card():
        return gateway.template(INCORRECT_CARD)

    @router.get("/insufficient-funds")
    def insufficient_funds():
        return gateway.template(INSUFFICIENT_FUNDS)

    @router.get("/error500")
    def error500():
        return JSONResponse(status_code=500, content=gateway.template(SERVER_ERROR))

    return router


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PaymentAPIError)
    async def payment_api_error(request: Request, exc: PaymentAPIError):
        logger.warning(
            "request_failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            status_code=exc.status_code,
            error=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]
        logger.warning("request_invalid", path=request.url.path, details=details)
        return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": details})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API for the given settings (defaults to the environment)."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    engine = make_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Create database tables on startup if they don't exist.
        init_db(app.state.engine)
        logger.info(
            "service_started",
            profile=settings.service_profile,
            order_list_min_amount=settings.order_list_min_amount,
            customer_endpoints=settings.enable_customer_endpoints,
        )
        yield
        app.state.engine.dispose()

    app = FastAPI(title="Mock Payment API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    register_error_handlers(app)

    if settings.simulate_delay:
        @app.middleware("http")
        async def simulate_delay(request: Request, call_next):
            if request.url.path.startswith(settings.api_prefix):
                await sleep(settings.simulate_delay_seconds)
            return await call_next(request)

    # --- Health endpoints ---
    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"ok": True, "docs": "/docs"}

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/db-health")
    def db_health(db: Session = Depends(get_db)):
        try:
            result = ping(db)
        except StorageError as e:
            return JSONResponse(status_code=500, content={"db": "down", "error": e.message})
        return {"db": "up", "result": result}

    api = APIRouter(prefix=settings.api_prefix)
    api.include_router(customer_delete_router())
    if settings.enable_customer_endpoints:
        api.include_router(customer_router())
    api.include_router(order_router(settings))
    api.include_router(gateway_router(settings))
    app.include_router(api)

    return app


app = create_app()
