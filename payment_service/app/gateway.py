"""
Stateless mock gateway surface.

Serves canned authorization responses and forwards authorization requests to
an external mock endpoint. Nothing here touches the database.
"""
import json
import random
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import requests

from .logging_config import get_logger
from .simulator import INCORRECT_CARD, INSUFFICIENT_FUNDS, SERVER_ERROR, SUCCESS, pick_gateway_outcome

logger = get_logger(__name__)

RESPONSES_DIR = Path(__file__).parent / "responses"

# Template file and the body used when the file is missing.
TEMPLATE_FILES = {
    SUCCESS: ("SuccessResponse.json", {"message": "Payment authorized (success)"}),
    INCORRECT_CARD: ("IncorrectCardDetailsResponse.json", {"error": "Incorrect card details"}),
    INSUFFICIENT_FUNDS: ("InsufficientFundsResponse.json", {"error": "Insufficient funds"}),
    SERVER_ERROR: ("500ErrorResponse.json", {"error": "Internal server error"}),
}

STATUS_FOR_OUTCOME = {
    SUCCESS: 200,
    INCORRECT_CARD: 400,
    INSUFFICIENT_FUNDS: 402,
    SERVER_ERROR: 500,
}


def load_templates(directory: Path = RESPONSES_DIR) -> Dict[str, Dict[str, Any]]:
    templates = {}
    for outcome, (filename, fallback) in TEMPLATE_FILES.items():
        path = directory / filename
        try:
            templates[outcome] = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("response_template_unavailable", template=filename, error=str(e))
            templates[outcome] = dict(fallback)
    return templates


TEMPLATES = load_templates()


def template(outcome: str) -> Dict[str, Any]:
    """Fresh copy of the canned body for an outcome."""
    return dict(TEMPLATES[outcome])


def authorize(order_id=None, requested_amount=None, outcome: Optional[Callable[[], str]] = None) -> Tuple[int, Dict[str, Any]]:
    """
    Simulates a one-shot gateway authorization.

    Returns the HTTP status code and body for the drawn outcome:
    200 success, 400 incorrect card, 402 insufficient funds, 500 server error.
    """
    result = (outcome or pick_gateway_outcome)()
    body = template(result)

    if result == SUCCESS:
        body["OrderId"] = order_id or body.get("OrderId") or f"ORDER-{random.randint(0, 9999)}"
        body["AuthorizedAmount"] = requested_amount or body.get("AuthorizedAmount") or 0
    elif result in (INCORRECT_CARD, INSUFFICIENT_FUNDS):
        body["OrderId"] = order_id

    logger.info("gateway_authorize", order_id=order_id, result=result)
    return STATUS_FOR_OUTCOME[result], body


def forward_authorization(payload: Any, url: str, timeout: float) -> Tuple[int, Any, bool]:
    """
    Forwards an authorization request to the external mock endpoint.

    Returns ``(status_code, body, is_json)``; transport failures become a 500
    with the error message in ``details``.
    """
    try:
        response = requests.post(url, json=payload, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error("external_authorize_failed", url=url, error=str(e))
        return 500, {"error": "Failed to reach external authorization endpoint", "details": str(e)}, True

    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return response.status_code, response.json(), True
        except ValueError:
            pass
    return response.status_code, response.text, False
