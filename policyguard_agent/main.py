from __future__ import annotations

import logging
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .ai_judge import SemanticClassifier
from .analyzer import scan_site, verify_script
from .config import configure_logging, settings
from .errors import ScanError
from .models import ErrorResponse, HealthResponse, ScanRequest, SiteReport, VerifyResponse

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="PolicyGuard Scan API", version="0.1.0")

# For local dev, this defaults to allowing http://localhost:3000.
# In production, set POLICYGUARD_CORS_ORIGINS to your deployed frontend origins.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


@app.exception_handler(ScanError)
async def _scan_error_handler(request: Request, exc: ScanError) -> JSONResponse:
    return _error(exc.status_code, exc.error, exc.message)


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return _error(400, "Invalid request", "; ".join(parts) or "Malformed request body.")


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    try:
        label = HTTPStatus(exc.status_code).phrase
    except ValueError:
        label = "Error"
    return _error(exc.status_code, label, str(exc.detail))


@app.exception_handler(Exception)
async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return _error(500, "Internal server error", str(exc))


@app.get("/scan-site", response_model=HealthResponse)
def health():
    classifier_ok = False
    if settings.gemini_api_key:
        classifier_ok = SemanticClassifier.from_settings(settings).available
    return HealthResponse(
        classifier_configured=bool(settings.gemini_api_key),
        classifier_ok=classifier_ok,
        model=settings.gemini_model,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@app.post(
    "/scan-site",
    response_model=SiteReport | VerifyResponse,
    responses=_ERROR_RESPONSES,
)
def scan_endpoint(req: ScanRequest):
    try:
        if req.action == "verify-script":
            return verify_script(req.url)
        return scan_site(req.url, classifier=SemanticClassifier.from_settings(settings))
    except ScanError:
        raise
    except Exception as e:
        logger.exception("POST handler error")
        raise HTTPException(status_code=500, detail=f"Scan failed: {e}")
