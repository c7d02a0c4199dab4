import logging
from dataclasses import dataclass
from typing import Any, Dict, List, MutableMapping, Optional, Tuple

import requests

from src.api.schemas import REVIEW_CATEGORY

logger = logging.getLogger(__name__)

# Human readable names for the model vocabulary. Unknown labels pass through.
LABEL_PRETTY: Dict[str, str] = {
    "Administrative rights": "Administrative Rights",
    "HR Support": "HR Support",
    "Internal Project": "Internal Project",
    "Miscellaneous": "Miscellaneous",
    "Hardware": "Hardware",
    "Access": "Access",
    "Purchase": "Purchase",
    "Storage": "Storage",
    REVIEW_CATEGORY: "Manual Review",
}

GENERIC_ERROR = "Error classifying the ticket."


@dataclass(frozen=True)
class ViewOutcome:
    """
    Last thing the page shows: either the envelope `data` or an error string.
    """

    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


def pretty_label(label: Optional[str]) -> str:
    if not label:
        return ""
    return LABEL_PRETTY.get(label, label)


def is_review(result: Optional[Dict[str, Any]]) -> bool:
    return bool(result) and result.get("category") == REVIEW_CATEGORY


def banner_text(result: Optional[Dict[str, Any]]) -> str:
    if not result:
        return ""
    if not is_review(result):
        return "Auto-assigned by the model ✅"
    return f"Manual review recommended ⚠️ (Top guess: {pretty_label(result.get('category_label'))})"


def format_percent(value: float) -> str:
    return f"{value * 100:.0f}%"


def threshold_for(result: Dict[str, Any], default_threshold: float) -> float:
    threshold = result.get("threshold_used")
    return default_threshold if threshold is None else threshold


def top_suggestions(result: Dict[str, Any]) -> List[Tuple[str, str]]:
    """
    Rows for the "Top suggestions" block as (pretty label, percentage).
    """
    return [(pretty_label(label), format_percent(score)) for label, score in result.get("top3") or []]


def can_submit(description: str, loading: bool) -> bool:
    # Same rule as the proxy: any non-empty text is a valid description
    return not loading and bool(description)


def start_submission(state: MutableMapping[str, Any]) -> None:
    """
    Button callback. Runs before the rerun, so that rerun already renders
    the button disabled while the call is in flight.
    """
    state["loading"] = True


def complete_submission(state: MutableMapping[str, Any], outcome: ViewOutcome) -> None:
    state["outcome"] = outcome
    state["loading"] = False


def outcome_from_response(status_code: int, body: Any) -> ViewOutcome:
    """
    Maps the proxy envelope to what the page should display, verbatim.
    """
    envelope = body if isinstance(body, dict) else {}

    if 200 <= status_code < 300 and envelope.get("success") and envelope.get("data"):
        return ViewOutcome(result=envelope["data"])

    return ViewOutcome(error=envelope.get("error") or GENERIC_ERROR)


def submit_description(api_url: str, description: str, timeout_seconds: float = 15) -> ViewOutcome:
    """
    Sends the description to the proxy's /classify endpoint.

    Args:
        api_url (str): Base URL of the proxy, e.g. 'http://localhost:8000'.
        description (str): Text typed by the user.
        timeout_seconds (float): Upper bound for the whole round-trip.

    Returns:
        ViewOutcome: Replaces whatever the page displayed before.
    """
    try:
        response = requests.post(
            f"{api_url.rstrip('/')}/classify",
            json={"description": description},
            headers={"Content-Type": "application/json"},
            timeout=timeout_seconds,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Could not reach the triage proxy: {e}")
        return ViewOutcome(error="Could not reach the classification service.")

    try:
        body = response.json()
    except ValueError:
        body = None

    return outcome_from_response(response.status_code, body)
