import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from college_admin.api.v1.catalog.router import router as catalog_router
from college_admin.api.v1.custom_fields.router import router as custom_fields_router
from college_admin.api.v1.enrollments.router import router as enrollments_router
from college_admin.api.v1.ledger.router import router as ledger_router
from college_admin.api.v1.progression.router import router as progression_router
from college_admin.api.v1.registration.router import router as registration_router
from college_admin.core.config import settings
from college_admin.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


async def transaction_failure_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": "TransactionFailure", "message": "The change could not be saved; nothing was modified"}},
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="College Administration Backend")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SQLAlchemyError, transaction_failure_handler)

    # Routers
    app.include_router(catalog_router)
    app.include_router(enrollments_router)
    app.include_router(progression_router)
    app.include_router(ledger_router)
    app.include_router(registration_router)
    app.include_router(custom_fields_router)

    return app


app = create_app()
