import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.adapters.factory import build_classifier
from src.api.schemas import ClassificationRequest, TicketData, TicketResponse
from src.core.config import load_config
from src.core.errors import ClientInputError, InternalError, TriageError, UpstreamUnavailableError
from src.core.utils import generate_ticket_id
from src.interfaces.classifier_provider import ClassifierProvider

# Configure logger
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("API")

INVALID_DESCRIPTION = 'Missing "description" field or it is not text.'
METHOD_NOT_ALLOWED = "Method not allowed. Use POST."

app_state = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting Ticket Triage Proxy...")

    load_dotenv()
    app_state["config"] = load_config("config.yaml")
    app_state["classifier"] = build_classifier(app_state["config"])
    logger.info(f"🧠 Classifier strategy: {app_state['classifier'].strategy}")

    yield
    app_state.clear()
    logger.info("🛑 Shutting down Ticket Triage Proxy...")


app = FastAPI(title="Ticket Triage Proxy", lifespan=lifespan)


def get_classifier() -> ClassifierProvider:
    # Dependency injection for the classification strategy
    classifier = app_state.get("classifier")
    if classifier is None:
        raise InternalError("Classifier is not initialized.")
    return classifier


def envelope_response(envelope: TicketResponse, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope.to_json())


# --- ERROR MAPPING: every failure leaves as {success: false, error} ---
@app.exception_handler(TriageError)
async def triage_error_handler(request: Request, exc: TriageError) -> JSONResponse:
    return envelope_response(TicketResponse(success=False, error=exc.message), exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    return await triage_error_handler(request, ClientInputError(INVALID_DESCRIPTION))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = METHOD_NOT_ALLOWED if exc.status_code == 405 else str(exc.detail)
    response = await triage_error_handler(request, ClientInputError(message, status_code=exc.status_code))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


# --- CLASSIFICATION PROXY ENDPOINT ---
@app.post("/classify", response_model=None)
def classify_ticket(request: ClassificationRequest, classifier: ClassifierProvider = Depends(get_classifier)):
    """
    Validates the description, asks the configured classifier and wraps the
    result with a display ticket ID.

    502 = Bad Gateway (the proxy worked, the classifier did not).
    500 = unexpected failure inside the proxy or the local stub.
    """
    try:
        result = classifier.classify_ticket(request.description)
    except UpstreamUnavailableError as e:
        logger.warning(
            f"Classifier unavailable: {e.message}",
            extra={"request_id": request.request_id, "strategy": classifier.strategy},
        )
        return envelope_response(TicketResponse(success=False, error=e.message), e.status_code)
    except Exception:
        logger.exception("Unexpected error while classifying ticket", extra={"request_id": request.request_id})
        error = InternalError()
        return envelope_response(TicketResponse(success=False, error=error.message), error.status_code)

    # The proxy owns the ticket ID, whatever the classifier sent
    fields = {k: v for k, v in result.model_dump().items() if k not in ("ticket_id", "ticketId")}
    data = TicketData(**fields, ticket_id=generate_ticket_id())
    logger.info(
        f"✅ Ticket {data.ticket_id} -> {data.category} ({data.confidence:.2f})",
        extra={"request_id": request.request_id, "ticket_id": data.ticket_id, "category": data.category},
    )
    return envelope_response(TicketResponse(success=True, data=data), 200)


@app.get("/health")
def health(classifier: ClassifierProvider = Depends(get_classifier)):
    """
    Liveness probe for the container orchestrator.
    """
    return {"status": "ok", "strategy": classifier.strategy}
