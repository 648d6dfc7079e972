"""FastAPI application for the mailing list.

Routes:
    POST   /subscribe                                   (rate-limited)
    GET    /verify/{token}
    POST   /admin/login                                 (rate-limited)
    GET    /admin/subscribers                           (bearer token)
    DELETE /admin/subscribers/{subscriber_id}           (bearer token)
    POST   /admin/subscribers/{subscriber_id}/resend-verification (bearer token)
    GET    /health

Run with:
    uvicorn tabletop_prep.mailing.api:create_app --factory
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import Depends, FastAPI, Header, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from tabletop_prep.core.config import Settings, get_settings
from tabletop_prep.core.exceptions import (
    AlreadySubscribedError,
    AlreadyVerifiedError,
    AuthenticationError,
    InvalidTokenError,
    PrepError,
    RateLimitExceededError,
    SubscriberNotFoundError,
    ValidationError,
)
from tabletop_prep.core.logging import get_logger
from tabletop_prep.mailing.database import AdminRecord, Database, SubscriberRecord
from tabletop_prep.mailing.mailer import Mailer, SmtpMailer
from tabletop_prep.mailing.ratelimit import RateLimiter
from tabletop_prep.mailing.service import SubscriptionService


logger = get_logger(__name__)


# =============================================================================
# Request / Response Schemas
# =============================================================================


class SubscribeRequest(BaseModel):
    email: str


class LoginRequest(BaseModel):
    username: str
    password: str


class SubscriberOut(BaseModel):
    id: str
    email: str
    verified: bool
    subscribed_at: datetime

    @classmethod
    def from_record(cls, record: SubscriberRecord) -> SubscriberOut:
        return cls(
            id=record.id,
            email=record.email,
            verified=record.verified,
            subscribed_at=record.subscribed_at,
        )


_STATUS_BY_ERROR: tuple[tuple[type[PrepError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AlreadySubscribedError, status.HTTP_400_BAD_REQUEST),
    (AlreadyVerifiedError, status.HTTP_400_BAD_REQUEST),
    (InvalidTokenError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (SubscriberNotFoundError, status.HTTP_404_NOT_FOUND),
    (RateLimitExceededError, status.HTTP_429_TOO_MANY_REQUESTS),
)

GENERIC_ERROR = "Server error occurred"


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


# =============================================================================
# Application Factory
# =============================================================================


def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    mailer: Mailer | None = None,
    service: SubscriptionService | None = None,
) -> FastAPI:
    """Build the mailing list API.

    Args:
        settings: Application settings; loaded from the environment if omitted.
        database: Subscriber store; opened at the configured path if omitted.
        mailer: Outbound mail transport; SMTP if omitted.
        service: Fully built service, overriding database and mailer.

    Returns:
        The configured FastAPI application.
    """
    settings = settings or get_settings()
    mailing = settings.mailing
    if service is None:
        service = SubscriptionService(
            database or Database(mailing.database_path),
            mailer or SmtpMailer(mailing),
            mailing,
        )
    service.ensure_admin()

    subscribe_limiter = RateLimiter(
        mailing.subscribe_limit,
        mailing.subscribe_window_seconds,
        message="Too many subscription attempts from this IP, please try again after an hour",
    )
    login_limiter = RateLimiter(
        mailing.login_limit,
        mailing.login_window_seconds,
        message="Too many login attempts from this IP, please try again after 15 minutes",
    )

    app = FastAPI(title=f"{settings.app_name} mailing list", version=settings.app_version)
    app.state.service = service
    app.state.subscribe_limiter = subscribe_limiter
    app.state.login_limiter = login_limiter
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    # -------------------------------------------------------------------------
    # Error handling
    # -------------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"loc": [str(part) for part in error["loc"]], "msg": error["msg"], "type": error["type"]}
            for error in exc.errors()
        ]
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": errors})

    @app.exception_handler(PrepError)
    async def handle_prep_error(request: Request, exc: PrepError) -> JSONResponse:
        for error_type, status_code in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                headers = None
                if isinstance(exc, RateLimitExceededError) and exc.retry_after_seconds is not None:
                    headers = {"Retry-After": str(max(1, int(exc.retry_after_seconds)))}
                content: dict[str, Any] = {"message": exc.message}
                if isinstance(exc, ValidationError):
                    content["errors"] = [exc.details]
                return JSONResponse(status_code=status_code, content=content, headers=headers)
        logger.error("Request failed", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"message": GENERIC_ERROR})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", path=request.url.path)
        return JSONResponse(status_code=500, content={"message": GENERIC_ERROR})

    # -------------------------------------------------------------------------
    # Dependencies
    # -------------------------------------------------------------------------

    def require_admin(authorization: str | None = Header(default=None)) -> AdminRecord:
        try:
            return service.authenticate(_bearer_token(authorization))
        except AuthenticationError:
            logger.warning("Admin request rejected")
            raise

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/subscribe")
    def subscribe(payload: SubscribeRequest, request: Request) -> dict[str, Any]:
        subscribe_limiter.hit(_client_key(request))
        service.subscribe(payload.email)
        return {
            "success": True,
            "message": "Please check your email to verify your subscription.",
        }

    @app.get("/verify/{token}")
    def verify(token: str) -> dict[str, str]:
        service.verify(token)
        return {"message": "Email verified successfully"}

    @app.post("/admin/login")
    def login(payload: LoginRequest, request: Request) -> dict[str, str]:
        login_limiter.hit(_client_key(request))
        return {"token": service.login(payload.username, payload.password)}

    @app.get("/admin/subscribers")
    def list_subscribers(admin: AdminRecord = Depends(require_admin)) -> dict[str, list[SubscriberOut]]:
        return {"subscribers": [SubscriberOut.from_record(s) for s in service.list_subscribers()]}

    @app.delete("/admin/subscribers/{subscriber_id}")
    def delete_subscriber(subscriber_id: str, admin: AdminRecord = Depends(require_admin)) -> dict[str, str]:
        service.delete_subscriber(subscriber_id)
        return {"message": "Subscriber removed"}

    @app.post("/admin/subscribers/{subscriber_id}/resend-verification")
    def resend_verification(
        subscriber_id: str, admin: AdminRecord = Depends(require_admin)
    ) -> dict[str, str]:
        service.resend_verification(subscriber_id)
        return {"message": "Verification email resent"}

    return app


__all__ = [
    "LoginRequest",
    "SubscribeRequest",
    "SubscriberOut",
    "create_app",
]
