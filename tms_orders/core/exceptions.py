from typing import Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from tms_orders.core.logging_config import logger


class ContentApiError(Exception):
    """
    Raised when the content API rejects or fails a request.

    Carries the HTTP status the caller should see and the upstream provider
    name so the error handler can build a structured response.
    """

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        message: str = "",
        provider: str = "content-api",
        code: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.provider = provider
        self.code = code or "CONTENT_API_ERROR"


class OrderValidationError(Exception):
    """Caller supplied an order payload that cannot be processed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OrderCodeExhaustedError(Exception):
    """No free order code was found within the configured number of attempts."""

    def __init__(self, organization_id: int, attempts: int):
        super().__init__(
            f"Could not generate a unique order code for organization "
            f"{organization_id} after {attempts} attempts"
        )
        self.organization_id = organization_id
        self.attempts = attempts


async def content_api_error_handler(request: Request, exc: ContentApiError) -> JSONResponse:
    logger.error(f"Content API error on {request.url.path}: {exc.status_code} {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "provider": exc.provider}
    )


async def order_validation_error_handler(request: Request, exc: OrderValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.message, "code": "ORDER_VALIDATION_ERROR"}
    )


async def order_code_exhausted_handler(request: Request, exc: OrderCodeExhaustedError) -> JSONResponse:
    logger.error(str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "code": "ORDER_CODE_EXHAUSTED"}
    )
