"""Main application entry point for the AulaGuard service.

This module initializes the FastAPI application, configures middleware,
and defines the API endpoints used by the academy front end to make
user-authored text safe before it is rendered.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

# Local imports
from aulaguard.app.config import settings
from aulaguard.app.config import DocumentRequest, PayloadRequest, SanitizeRequest, TextRequest
import aulaguard.engines.instances as services

# Setup Logger
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("aulaguard.api")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manages application lifecycle resources.

    - **Startup**: Initializes the global engine instances from the policy.
    - **Shutdown**: Logs the shutdown sequence.
    """
    logger.info("🚀 AulaGuard starting up...")
    services.initialize_services()

    yield

    logger.info("🛑 AulaGuard shutting down...")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def _sanitizer():
    """Returns the sanitizer, or 503 if startup has not built it."""
    if services.sanitizer_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Sanitizer is not initialized"
        )
    return services.sanitizer_service

@app.get("/health")
def health_check():
    """Returns the operational status of the service."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc)}

@app.post("/sanitize")
def sanitize(request: SanitizeRequest):
    """Sanitizes one rich-text fragment.

    The sanitizer never fails: on an internal fault it returns an empty
    fragment, so this endpoint always answers 200 once the service is up.
    """
    return {"html": _sanitizer().sanitize(request.html)}

@app.post("/sanitize/text")
def sanitize_text(request: TextRequest):
    """Strips markup from a plain-text field."""
    return {"text": _sanitizer().strip_markup(request.text)}

@app.post("/sanitize/payload")
def sanitize_payload(request: PayloadRequest):
    """Sanitizes the rich-text fields of a record.

    Args:
        request (PayloadRequest): The record and the keys holding rich text.

    Returns:
        dict: Success status and the sanitized copy of the record.
    """
    sanitizer = _sanitizer()
    try:
        cleaned = sanitizer.clean_payload(request.payload, request.fields)
    except Exception as e:
        logger.error(f"❌ Payload sanitization failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal processing failed."
        )

    return {"status": "success", "payload": cleaned}

@app.post("/documents/render")
def render_document(request: DocumentRequest):
    """Fills and sanitizes the sections of an academy document.

    Pipeline Steps:
    1. **Context**: Builds placeholder values from academy and student data.
    2. **Substitute**: Replaces `#{NAME}#` tokens in each section.
    3. **Sanitize**: Cleans each filled section and strips markup from titles.

    Raises:
        HTTPException (503): If the document engine is disabled by policy.
    """
    if services.document_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Document rendering is disabled by policy"
        )

    try:
        rendered = services.document_service.render_document(
            request.sections, request.academy, request.student
        )
    except Exception as e:
        logger.error(f"❌ Document rendering failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal processing failed."
        )

    return {"sections": [section.model_dump() for section in rendered]}
