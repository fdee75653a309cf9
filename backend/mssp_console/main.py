"""FastAPI application entry point"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from mssp_console.api import admin, auth, clients, health
from mssp_console.config import settings
from mssp_console.core.exceptions import AuthError
from mssp_console.core.sessions import clear_session_cookie
from mssp_console.middleware.rate_limit import limiter
from mssp_console.utils.logger import logger, setup_logging

# Setup logging
setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    logger.info("MSSP Console backend starting up", extra={
        "version": "0.1.0",
        "environment": settings.ENVIRONMENT,
        "rate_limiting": settings.RATE_LIMIT_ENABLED,
        "monitoring": settings.METRICS_ENABLED
    })
    if settings.is_production and settings.JWT_SECRET == "change-me-in-production":
        logger.warning("JWT_SECRET is the default value; set a strong secret before exposing the console")
    yield
    logger.info("MSSP Console backend shutting down")


app = FastAPI(
    title="MSSP Console",
    description="Multi-tenant security-operations console API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ===== Middleware Setup =====

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.METRICS_ENABLED:
    from mssp_console.middleware.monitoring import MonitoringMiddleware
    app.add_middleware(MonitoringMiddleware)

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics", "/health", "/health/ready", "/health/live"],
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

app.state.limiter = limiter

# ===== Route Setup =====

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(clients.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "service": "MSSP Console",
        "version": "0.1.0",
        "status": "operational",
        "docs": "/docs",
        "health": "/health",
    }


# ===== Error Handlers =====

@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    """Render authentication failures as {success: false, message[, blocked]}"""
    content = {"success": False, "message": exc.message}
    if exc.blocked:
        content["blocked"] = True

    response = JSONResponse(status_code=exc.status_code, content=content)
    if exc.clear_cookie:
        clear_session_cookie(response)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid {field}: {first.get('msg', 'invalid value')}" if field else "Invalid request"
    return JSONResponse(status_code=400, content={"success": False, "message": message})


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors"""
    logger.warning(
        "Rate limit exceeded",
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": "Too many requests. Please try again later.",
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={
            "path": request.url.path,
            "method": request.method
        },
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Server error"}
    )
