import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import config
from .domain.notifications.router import router as notifications_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    logger.info(f"Record store backend: {config.RECORD_STORE_BACKEND}")

    if config.RECORD_STORE_BACKEND == "database":
        from . import models  # noqa: F401 - registers tables on Base
        from .database import Base, engine

        try:
            Base.metadata.create_all(bind=engine, checkfirst=True)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Failed to create database tables: {e}")

    if not config.CRON_SECRET:
        logger.warning("⚠️ CRON_SECRET not set - the trigger endpoint will refuse every call")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Salon Notifier API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


# Routes
app.include_router(notifications_router)


@app.get("/")
def root():
    return {"message": "Salon Notifier API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
