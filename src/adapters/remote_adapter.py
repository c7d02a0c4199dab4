import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Dict, List, Optional, Tuple

import requests
from pydantic import ValidationError
from urllib3.exceptions import ReadTimeoutError

from src.api.schemas import ClassificationResult
from src.core.config import DEFAULT_TIMEOUT_SECONDS
from src.core.errors import UpstreamUnavailableError
from src.interfaces.classifier_provider import ClassifierProvider

# Initialize logger for the remote classifier adapter
logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Timeout connecting to the classifier."
CONNECTION_MESSAGE = "Could not connect to the classifier."
MALFORMED_MESSAGE = "Classifier returned a malformed response."

# Small reads so a trickling body notices the deadline quickly
READ_CHUNK_BYTES = 64
MAX_RESPONSE_BYTES = 1024 * 1024

# Outbound calls run here so the caller can stop waiting at the deadline
_call_executor = ThreadPoolExecutor(max_workers=16, thread_name_prefix="classifier-call")


class RemoteClassifierAdapter(ClassifierProvider):
    """
    Adapter for the externally hosted model server (`POST {base_url}/predict`).

    The model owns the decision (including the REVIEW sentinel); this adapter
    only transports the description and validates the shape of the answer.

    `timeout_seconds` bounds the whole exchange (connect, headers and body),
    not each socket operation. Past the deadline the caller gets a timeout
    failure and the in-flight call is told to stop reading and close.
    """

    strategy = "remote"

    def __init__(
        self,
        base_url: Optional[str],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        categories: Optional[List[str]] = None,
    ) -> None:
        self.base_url = base_url.strip().rstrip("/") if base_url and base_url.strip() else None
        self.timeout_seconds = timeout_seconds
        self.categories = categories or []

        if self.base_url:
            logger.info(f"Remote Adapter initialized. Targeting {self.base_url}/predict (timeout {timeout_seconds}s)")
        else:
            logger.warning("Remote Adapter initialized without ML_API_URL. Every request will fail with 502.")

    @property
    def predict_url(self) -> Optional[str]:
        return f"{self.base_url}/predict" if self.base_url else None

    def classify_ticket(self, description: str) -> ClassificationResult:
        if not self.base_url:
            raise UpstreamUnavailableError("ML_API_URL is not configured.")

        deadline = time.monotonic() + self.timeout_seconds
        cancelled = threading.Event()
        future = _call_executor.submit(self._exchange, description, deadline, cancelled)

        try:
            status_code, ok, raw_body = future.result(timeout=self.timeout_seconds)
        except FutureTimeoutError as e:
            cancelled.set()
            future.cancel()
            logger.error(f"Classifier did not answer within {self.timeout_seconds}s; call abandoned.")
            raise UpstreamUnavailableError(TIMEOUT_MESSAGE) from e
        except requests.exceptions.RequestException as e:
            if self._is_timeout(e):
                logger.error(f"Classifier timed out after {self.timeout_seconds}s: {e}")
                raise UpstreamUnavailableError(TIMEOUT_MESSAGE) from e
            logger.error(f"Failed to communicate with the classifier: {e}")
            raise UpstreamUnavailableError(CONNECTION_MESSAGE) from e

        payload = self._parse_body(raw_body)

        if not ok:
            message = self._upstream_error(payload) or f"Classifier responded with status {status_code}"
            logger.warning(
                "Classifier returned an error status",
                extra={"status_code": status_code, "upstream_error": message},
            )
            raise UpstreamUnavailableError(message)

        if payload is None:
            logger.error(f"Classifier answered {status_code} with a non-JSON body.")
            raise UpstreamUnavailableError(MALFORMED_MESSAGE)

        if not payload.get("success") or not payload.get("data"):
            message = self._upstream_error(payload) or "Classifier returned no result."
            logger.warning(f"Classifier reported failure: {message}")
            raise UpstreamUnavailableError(message)

        try:
            result = ClassificationResult.model_validate(payload["data"])
        except ValidationError as e:
            logger.error(f"Classifier payload does not match the result contract: {e}")
            raise UpstreamUnavailableError(MALFORMED_MESSAGE) from e

        if self.categories and result.category not in self.categories:
            logger.warning(f"Classifier returned category '{result.category}' outside the configured vocabulary.")

        return result

    def _exchange(self, description: str, deadline: float, cancelled: threading.Event) -> Tuple[int, bool, bytes]:
        """
        Performs the POST and reads the body against the shared deadline.

        Returns:
            Tuple[int, bool, bytes]: Status code, `response.ok` and raw body.
        """
        response = requests.post(
            self.predict_url,
            json={"description": description},
            headers={"Content-Type": "application/json"},
            timeout=self.timeout_seconds,
            stream=True,
        )
        try:
            body = bytearray()
            for chunk in response.iter_content(chunk_size=READ_CHUNK_BYTES):
                if cancelled.is_set() or time.monotonic() > deadline:
                    raise requests.exceptions.ReadTimeout("Classifier response exceeded the deadline.")
                body.extend(chunk)
                if len(body) > MAX_RESPONSE_BYTES:
                    raise UpstreamUnavailableError(MALFORMED_MESSAGE)
        finally:
            response.close()

        return response.status_code, response.ok, bytes(body)

    @staticmethod
    def _is_timeout(error: requests.exceptions.RequestException) -> bool:
        if isinstance(error, requests.exceptions.Timeout):
            return True
        # requests re-raises a stalled body read as ConnectionError(ReadTimeoutError)
        return isinstance(error.__context__, ReadTimeoutError) or any(
            isinstance(arg, ReadTimeoutError) for arg in error.args
        )

    @staticmethod
    def _parse_body(raw_body: bytes) -> Optional[Dict[str, Any]]:
        try:
            body = json.loads(raw_body)
        except ValueError:
            return None
        return body if isinstance(body, dict) else None

    @staticmethod
    def _upstream_error(payload: Optional[Dict[str, Any]]) -> Optional[str]:
        if not payload:
            return None
        error = payload.get("error")
        return error if isinstance(error, str) and error else None
