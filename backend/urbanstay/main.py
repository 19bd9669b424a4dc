import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from urbanstay.core.config import get_settings
from urbanstay.db.base import Base
from urbanstay.db.session import engine
from urbanstay.exceptions.custom import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    UrbanStayError,
    ValidationError,
)
from urbanstay.exceptions.handlers import (
    authentication_error_handler,
    authorization_error_handler,
    not_found_error_handler,
    request_validation_error_handler,
    unhandled_error_handler,
    urbanstay_error_handler,
    validation_error_handler,
)
from urbanstay.api.routers import (
    alerts as alerts_router,
    auth as auth_router,
    bookings as bookings_router,
    inquiries as inquiries_router,
    payments as payments_router,
    properties as properties_router,
    reviews as reviews_router,
)

settings = get_settings()

ENDPOINTS = {
    "auth": "/api/auth",
    "properties": "/api/properties",
    "bookings": "/api/bookings",
    "payments": "/api/payments",
    "inquiries": "/api/inquiries",
    "reviews": "/api/reviews",
    "alerts": "/api/alerts",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logging.getLogger(__name__).info("%s %s started", settings.PROJECT_NAME, settings.VERSION)

    yield

    await engine.dispose()


app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

# ---------------------------
# CORS
# ---------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------
# Error handlers
# ---------------------------
app.add_exception_handler(ValidationError, validation_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(AuthenticationError, authentication_error_handler)
app.add_exception_handler(AuthorizationError, authorization_error_handler)
app.add_exception_handler(NotFoundError, not_found_error_handler)
app.add_exception_handler(UrbanStayError, urbanstay_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# ---------------------------
# Routers
# ---------------------------
app.include_router(auth_router.router, prefix=ENDPOINTS["auth"], tags=["auth"])
app.include_router(properties_router.router, prefix=ENDPOINTS["properties"], tags=["properties"])
app.include_router(bookings_router.router, prefix=ENDPOINTS["bookings"], tags=["bookings"])
app.include_router(payments_router.router, prefix=ENDPOINTS["payments"], tags=["payments"])
app.include_router(inquiries_router.router, prefix=ENDPOINTS["inquiries"], tags=["inquiries"])
app.include_router(reviews_router.router, prefix=ENDPOINTS["reviews"], tags=["reviews"])
app.include_router(alerts_router.router, prefix=ENDPOINTS["alerts"], tags=["alerts"])


# ---------------------------
# Service endpoints
# ---------------------------
@app.get("/api/health")
async def health():
    return {"status": "ok"}


@app.get("/api")
async def api_info():
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "endpoints": ENDPOINTS,
    }


# ---------------------------
# Run
# ---------------------------
if __name__ == "__main__":
    uvicorn.run("urbanstay.main:app", host="0.0.0.0", port=8000, reload=True)
