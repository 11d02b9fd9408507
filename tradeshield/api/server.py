import uuid

from fastapi import Depends, FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tradeshield.api.analyze import router as analyze_router
from tradeshield.api.dependencies import BodyError, get_analysis_service
from tradeshield.api.feedback import router as feedback_router
from tradeshield.config import settings
from tradeshield.database import check_db_connection, init_db
from tradeshield.services.analysis_service import AnalysisService
from tradeshield.utils.logging_config import StructuredLogger, init_logging, metrics, request_id_var

VERSION = "0.1.0"

# Initialize structured logging
init_logging()

logger = StructuredLogger(__name__)

init_db()

app = FastAPI(
    title="TradeShield API",
    version=VERSION,
    description="AI-assisted fraud risk analysis for secondhand merchandise trades",
    docs_url="/docs" if settings.debug else None,  # Disable docs in production
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# Security headers middleware
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    if settings.is_production:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


# Request id for log correlation
@app.middleware("http")
async def bind_request_id(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(BodyError)
async def body_error_handler(request: Request, exc: BodyError):
    return exc.response


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return JSONResponse(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            content={"error": "Method not allowed"},
        )
    return await http_exception_handler(request, exc)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unexpected error", path=request.url.path, error=str(exc), exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )


app.include_router(analyze_router)
app.include_router(feedback_router)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/status")
def status_info(service: AnalysisService = Depends(get_analysis_service)):
    """
    API status and configuration info.
    Useful for debugging and monitoring.
    """
    return {
        "status": "ok",
        "version": VERSION,
        "environment": settings.environment,
        "openai_configured": service.llm.is_configured,
        "database_connected": check_db_connection(),
        "metrics": metrics.get_stats(),
    }
