from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from app.config import settings
from app.core.logging_config import setup_logging, get_logger
from app.database.session import Base, engine
from app.routes import (
    core_router,
    auth_router,
    user_router,
    driver_router,
    brand_router,
    vehicle_router,
    trip_router,
    inscription_router,
)
from app.utils.response_utils import ResponseWrapper, handle_http_error
import app.models  # noqa: F401  registers every table on Base.metadata

# Setup logging as early as possible
setup_logging(log_level=settings.LOG_LEVEL, force_configure=True)
logger = get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Carpooling API: drivers publish trips, riders book seats",
    version=settings.APP_VERSION,
)

# Set up CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(core_router)
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(user_router, prefix=settings.API_PREFIX)
app.include_router(driver_router, prefix=settings.API_PREFIX)
app.include_router(brand_router, prefix=settings.API_PREFIX)
app.include_router(vehicle_router, prefix=settings.API_PREFIX)
app.include_router(trip_router, prefix=settings.API_PREFIX)
app.include_router(inscription_router, prefix=settings.API_PREFIX)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Every HTTP error leaves as the standard error envelope"""
    if not isinstance(exc, HTTPException):
        exc = HTTPException(status_code=exc.status_code, detail=exc.detail, headers=getattr(exc, "headers", None))
    wrapped = handle_http_error(exc)
    return JSONResponse(status_code=wrapped.status_code, content=wrapped.detail, headers=wrapped.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg"),
        }
        for err in exc.errors()
    ]
    logger.info(f"[Validation] {request.method} {request.url.path}: {details}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(
            ResponseWrapper.error(message="Request validation failed", error_code="VALIDATION_ERROR", details=details)
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ResponseWrapper.error(message="Unexpected server error", error_code="INTERNAL_SERVER_ERROR"),
    )


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    Base.metadata.create_all(bind=engine)
    logger.info(f"🌟 {settings.APP_NAME} starting up (env={settings.ENV})")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info(f"🛑 {settings.APP_NAME} shutting down...")


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
