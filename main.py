import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import currency
from app.core import config
from app.db.settings_repository import build_settings_repository
from app.services.currency_store import CurrencyStore, CurrencyStoreNotInitialized
from app.utils.error_codes import HTTP_STATUS_TO_ERROR_CODE
from app.utils.helpers import error_response

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def create_tables():
    from app.db.base import Base
    from app.db.get_db import engine
    from app.models import app_setting  # noqa: F401

    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.SETTINGS_BACKEND == "sql" and not config.IS_PRODUCTION:
        create_tables()

    store = CurrencyStore(
        build_settings_repository(),
        default_code=config.DEFAULT_CURRENCY,
        setting_key=config.CURRENCY_SETTING_KEY
    )
    app.state.currency_store = store
    await store.load_preference()
    logger.info("Active currency: %s", store.get_active_settings().code.value)
    yield


app = FastAPI(
    title="Franchise Back-Office API",
    description="Currency preference service for the franchise dashboard",
    version="1.0.0",
    lifespan=lifespan
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

API_PREFIX = "/api/v1"

# Root route
@app.get("/")
def root():
    return {"success": True, "message": "Welcome to the franchise back-office API!", "data": None}

# Include routers
app.include_router(currency.router, prefix=f"{API_PREFIX}/settings/currency", tags=["Currency"])

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    error_code = HTTP_STATUS_TO_ERROR_CODE.get(exc.status_code, "SERVER_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(error_code, exc.detail),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=error_response(
            HTTP_STATUS_TO_ERROR_CODE.get(422, "VALIDATION_ERROR"),
            "Invalid request: Please send the correct content type and required fields.",
            exc.errors()
        ),
    )

@app.exception_handler(CurrencyStoreNotInitialized)
async def store_not_initialized_handler(request: Request, exc: CurrencyStoreNotInitialized):
    logger.error("%s", exc)
    return JSONResponse(
        status_code=500,
        content=error_response(HTTP_STATUS_TO_ERROR_CODE[500], str(exc)),
    )
