import logging
import traceback
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from contextlib import asynccontextmanager
from routers import admin, catalog
from config import CORS_ORIGINS, LOG_LEVEL, STORAGE_CREDENTIALS, is_production
from exceptions import CatalogError
from utils.logging import configure_logging
from utils.uploader import configure_storage


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    App lifespan
    Settings were validated at import, here they get applied once
    """
    configure_logging(LOG_LEVEL)
    configure_storage(STORAGE_CREDENTIALS)
    yield


def error_payload(exc: Exception, message: str, kind: str, details=None, diagnostics=None) -> dict:
    payload = {"message": message, "kind": kind}
    if details is not None:
        payload["details"] = details
    if not is_production():
        if diagnostics:
            payload["diagnostics"] = diagnostics
        payload["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return jsonable_encoder(payload)


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(
        level,
        exc.message,
        exc_info=exc if level == logging.ERROR else None,
        extra={"kind": exc.kind, "path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc, exc.message, exc.kind, exc.details, exc.diagnostics),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path, "method": request.method})
    return JSONResponse(status_code=500, content=error_payload(exc, "Internal server error", "internal"))


# App object
app = FastAPI(lifespan=lifespan)
app.include_router(admin.router)
app.include_router(catalog.router)
app.add_exception_handler(CatalogError, catalog_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


@app.get("/", tags=["health"])
async def home() -> dict:
    """
    Home page...
    """
    return {"message": "Catalog publishing service"}


app.add_middleware(
    CORSMiddleware,
    allow_origins = CORS_ORIGINS,
    allow_credentials = True,
    allow_methods = ["*"],
    allow_headers = ["*"]
)
