"""Application factory: builds the app from explicit settings."""

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from paydesk.config import Settings, get_settings
from paydesk.database import Base, make_engine, make_session_factory
from paydesk.errors import AppError, DependencyError, LoginRequired
from paydesk.logging_config import setup_logging
from paydesk.models import account, payment_reference, session  # noqa: F401  (register tables)
from paydesk.routers import auth, pages, payments
from paydesk.templating import STATIC_DIR
from paydesk.utils import hashing
from paydesk.utils.mailer import MailSession
from paydesk.utils.paystack import PaystackClient

logger = logging.getLogger("paydesk")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)
    hashing.configure(settings.BCRYPT_ROUNDS)

    engine = make_engine(settings.DATABASE_URL)
    # Create tables if missing
    Base.metadata.create_all(bind=engine)

    app = FastAPI(title="Paydesk", version="1.0.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.SessionLocal = make_session_factory(engine)
    app.state.mailer = MailSession(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.EMAIL,
        password=settings.EMAIL_PASSWORD,
        timeout=settings.SMTP_TIMEOUT,
    )
    app.state.paystack = PaystackClient(
        secret_key=settings.PAYSTACK_SECRET_KEY,
        base_url=settings.PAYSTACK_BASE_URL,
        timeout=settings.PAYSTACK_TIMEOUT,
    )
    if not settings.EMAIL:
        logger.warning("EMAIL is not set; password reset mails will not authenticate")
    if not settings.PAYSTACK_SECRET_KEY:
        logger.warning("PAYSTACK_SECRET_KEY is not set; payment verification will fail")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        try:
            response = await call_next(request)
            ms = int((time.time() - start) * 1000)
            logger.info("%s %s -> %s (%dms)", request.method, request.url.path, response.status_code, ms)
            return response
        except Exception:
            ms = int((time.time() - start) * 1000)
            logger.exception("Unhandled error %s %s (%dms)", request.method, request.url.path, ms)
            raise

    @app.middleware("http")
    async def apply_response_headers(request: Request, call_next):
        response = await call_next(request)
        # Prevent UI redress attacks
        response.headers["Content-Security-Policy"] = "frame-ancestors 'none'"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE,
        https_only=settings.SESSION_HTTPS_ONLY,
        same_site="lax",
    )

    @app.exception_handler(LoginRequired)
    async def login_required(request: Request, exc: LoginRequired):
        return RedirectResponse("/login", status_code=302)

    @app.exception_handler(DependencyError)
    async def dependency_failed(request: Request, exc: DependencyError):
        logger.error("Dependency failure on %s %s: %s", request.method, request.url.path, exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(AppError)
    async def app_error(request: Request, exc: AppError):
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(SQLAlchemyError)
    async def database_error(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return PlainTextResponse("Server error", status_code=500)

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        return PlainTextResponse("Invalid form input", status_code=400)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    app.include_router(pages.router)
    app.include_router(auth.router)
    app.include_router(payments.router)

    return app
