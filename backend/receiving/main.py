# backend/receiving/main.py
import logging

from fastapi import FastAPI, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.orm import Session
from sqlalchemy import text

from receiving.core.api import ok, fail, fail_from, status_for, UTF8JSONResponse
from receiving.core.config import get_settings
from receiving.core.db import get_db
from receiving.core.logging import configure_logging
from receiving.domain.errors import ReceivingError
from receiving.routers.inbound import router as inbound_router

configure_logging()
logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title="Inbound Receiving", default_response_class=UTF8JSONResponse)


# -----------------------------
# Error envelope
# -----------------------------
@app.exception_handler(ReceivingError)
async def receiving_error_to_envelope(request: Request, exc: ReceivingError):
    if status_for(exc) >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, type(exc).__name__, exc.message)
    return fail_from(exc)


@app.exception_handler(StarletteHTTPException)
async def http_exception_to_envelope(request: Request, exc: StarletteHTTPException):
    return fail(str(exc.detail) if exc.detail else exc.__class__.__name__, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_to_envelope(request: Request, exc: RequestValidationError):
    return fail("Validation error", status_code=422, meta={"errors": jsonable_encoder(exc.errors())})


# -----------------------------
# CORS (.env)
# -----------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- Health ----
@app.get("/health")
def health():
    return ok({"service": "Inbound Receiving"})


@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    val = db.execute(text("SELECT 1")).scalar()
    return ok({"db": "ok", "select1": val})


app.include_router(inbound_router)
logger.info("routes registered: /inbound-receipts")
