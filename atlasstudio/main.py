"""
AtlasStudio - authentication backend

FastAPI application entry point.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

# Import observability modules
from atlasstudio.config import settings
from atlasstudio.database import create_all_tables
from atlasstudio.errors import AuthError, UnauthorizedError
from atlasstudio.logging_config import get_logger
from atlasstudio.sentry_config import configure_sentry
from atlasstudio.middleware.logging import LoggingMiddleware
from atlasstudio.routes.metrics import router as metrics_router

# Import route modules
from atlasstudio.routes.auth import router as auth_router
from atlasstudio.routes.api import router as api_router

# Initialize Sentry (if SENTRY_DSN is set)
configure_sentry()

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        await create_all_tables()
        logger.info("tables_created")
    yield


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Local and OAuth2 account authentication for AtlasStudio",
    lifespan=lifespan,
)

# Add logging middleware FIRST (runs before other middleware)
app.add_middleware(LoggingMiddleware)

# Add SessionMiddleware for OAuth state (required by Authlib)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.JWT_SECRET_KEY,
)

# Add CORS middleware to allow frontend to send cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    """Map the auth error taxonomy to {"message": ...} responses."""
    logger.info(
        "request_rejected",
        route=request.url.path,
        error=type(exc).__name__,
        status_code=exc.status_code,
        message=exc.message
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=headers
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported like any other ValidationError."""
    logger.info(
        "request_rejected",
        route=request.url.path,
        error="RequestValidationError",
        status_code=400,
        details=[error.get("msg") for error in exc.errors()]
    )
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request body"}
    )


# Include metrics endpoint FIRST (so it's always available)
app.include_router(metrics_router)

# Include authentication routes
app.include_router(auth_router)

# Include API routes
app.include_router(api_router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT
    }
