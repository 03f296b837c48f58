"""DevCamper bootcamps API.

Public listings and statistics for coding bootcamps, with publisher-owned
create, update and delete operations. Records live in MongoDB.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .api.bootcamps import router as bootcamps_router
from .database import init_db, close_db, check_db_connection, get_db_info
from .logging import configure_logging, get_logger, get_trace_id, set_trace_id
from .models.schemas import HealthResponse

settings = get_settings()
logger = get_logger("devcamper")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    configure_logging()
    logger.info("devcamper_starting", version=settings.version)

    await init_db()

    db_info = get_db_info()
    if await check_db_connection():
        logger.info("mongodb_connected", url=db_info["url"], database=db_info["database"])
    else:
        logger.error("mongodb_unreachable", url=db_info["url"], database=db_info["database"])

    yield

    logger.info("devcamper_shutting_down")
    await close_db()


app = FastAPI(
    title="DevCamper",
    description="""
DevCamper bootcamps API.

- Anyone can list, filter and read bootcamps and their statistics
- Publishers and admins can create bootcamps; a publisher owns at most one
- Only a bootcamp's owner or an admin can update or delete it
    """,
    version=settings.version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allowed_methods,
    allow_headers=settings.cors_allowed_headers,
)


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    """Bind a trace id to the request and echo it back."""
    trace_id = set_trace_id(request.headers.get("X-Request-ID"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = trace_id
    return response


def error_envelope(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_envelope(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return error_envelope(400, "; ".join(messages))


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    # 500 responses never pass back through trace_requests
    trace_id = get_trace_id()
    return error_envelope(500, "Server Error", {"X-Request-ID": trace_id} if trace_id else None)


app.include_router(bootcamps_router)


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    db_connected = await check_db_connection()
    return HealthResponse(
        status="healthy" if db_connected else "degraded",
        version=settings.version,
        database="connected" if db_connected else "disconnected",
    )


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with basic info."""
    return {
        "service": "devcamper",
        "version": settings.version,
        "bootcamps": "/api/v1/bootcamps",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "devcamper.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
