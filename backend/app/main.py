from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import router as api_router
from app.core.config import Settings
from app.core.exceptions import ConfigurationError, LedgerError, ValidationError
from app.core.logging import get_logger
from app.services.ledger_service import LedgerService

logger = get_logger("rideledger.main")

LOCALHOST_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:8000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8000",
]

CORS_ORIGINS = {
    "development": LOCALHOST_ORIGINS,
    "production": [],
}

ERROR_STATUS = {
    ValidationError: 422,
    ConfigurationError: 400,
}


def create_app(settings: Settings | None = None, ledger: LedgerService | None = None) -> FastAPI:
    """Build the API with one ledger service owned by the application."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = ledger or LedgerService.from_settings(settings)
        service.start()
        app.state.ledger = service
        logger.info(f"Ledger ready with {len(service.list_transactions())} transactions")
        yield

    app = FastAPI(title="Ride Ledger API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS.get(settings.environment, CORS_ORIGINS["development"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=status_code, content={"detail": exc.message})

    app.include_router(api_router)
    return app


app = create_app()
