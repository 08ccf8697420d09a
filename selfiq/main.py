from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
from dotenv import load_dotenv

# Import core components
from selfiq.core.logging_config import setup_logging
from selfiq.core.settings import settings
from selfiq.middleware.logging import LoggingMiddleware

# Import configuration
from selfiq.config import init_firebase

# Import route modules
from selfiq.routes import assessments, sessions, results, health
from selfiq.services.feedback import FeedbackService
from selfiq.exceptions import (
    UnauthorizedException, ForbiddenException,
    NotFoundException, ValidationException,
    InvalidTransitionError, UnknownAssessmentError, UnknownAnswerError,
)

# Load environment variables
load_dotenv()

# Set up logging first
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    logger.info("=" * 50)
    logger.info("SelfIQ Assessment API starting up")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"CORS origins: {settings.cors_origins}")
    logger.info(f"SQL Debug: {'enabled' if settings.sql_debug else 'disabled'}")
    logger.info(f"Content directory: {settings.content_dir}")
    logger.info("=" * 50)

    feedback = FeedbackService(enabled=settings.feedback_enabled)
    feedback.initialize()
    app.state.feedback = feedback

    yield
    # Shutdown logic
    feedback.dispose()
    logger.info("SelfIQ Assessment API shutting down gracefully")

app = FastAPI(
    title="SelfIQ Assessment API",
    description="Personality assessment sessions, scoring and result history",
    version="1.0.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# Add middleware in correct order (last added = first executed)
app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_origins != ["*"],
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Initialize Firebase (skip in test environment)
if os.getenv("ENV") != "test":
    init_firebase()

# Include routers
app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(assessments.router)
app.include_router(sessions.router)
app.include_router(results.router)


def _error_response(request: Request, status_code: int, detail: str) -> JSONResponse:
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "correlation_id": correlation_id}
    )


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Unauthorized access attempt on {request.url.path}")
    return _error_response(request, 401, exc.detail)

@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Forbidden access attempt on {request.url.path}")
    return _error_response(request, 403, exc.detail)

@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Validation error on {request.url.path}: {exc.detail}")
    return _error_response(request, 400, exc.detail)

@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Not found error on {request.url.path}: {exc.detail}")
    return _error_response(request, 404, exc.detail)

@app.exception_handler(UnknownAssessmentError)
async def unknown_assessment_handler(request: Request, exc: UnknownAssessmentError):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] {exc} on {request.url.path}")
    return _error_response(request, 404, str(exc))

@app.exception_handler(UnknownAnswerError)
async def unknown_answer_handler(request: Request, exc: UnknownAnswerError):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Rejected answer on {request.url.path}: {exc}")
    return _error_response(request, 400, str(exc))

@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Invalid session transition on {request.url.path}: {exc}")
    return _error_response(request, 409, str(exc))

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.error(f"[{correlation_id}] Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)

    if settings.is_development:
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "error": str(exc),
                "correlation_id": correlation_id,
                "type": type(exc).__name__
            }
        )
    return _error_response(request, 500, "Internal server error")

# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": "SelfIQ Assessment API",
        "version": "1.0.0",
        "environment": settings.environment,
        "docs_url": "/docs" if settings.is_development else None,
        "health_check": "/health",
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info" if settings.is_development else "warning"
    )
