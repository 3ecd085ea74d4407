from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.app.config import get_settings
from src.app.dependencies import get_billing_service, get_mongo_factory
from src.app.routes import router
from src.services.errors import ClassifiedError
from src.utils.logging import configure_logging

settings = get_settings()
configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    await get_billing_service().drain()
    get_mongo_factory().close()


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
app.include_router(router)


@app.exception_handler(ClassifiedError)
async def classified_error_handler(_: Request, exc: ClassifiedError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "error": exc.to_dict()},
    )
