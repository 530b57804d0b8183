from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from tms_orders.database import get_db
from tms_orders.routers import order, dispatch
from tms_orders.core.exceptions import (
    ContentApiError,
    OrderCodeExhaustedError,
    OrderValidationError,
    content_api_error_handler,
    order_code_exhausted_handler,
    order_validation_error_handler,
)
from tms_orders.core.config import settings
from tms_orders.core.logging_config import logger

# Schema is owned by the content API; tables are never created from here

app = FastAPI(
    title="TMS Orders API",
    version="1.0.0",
    docs_url=None if settings.is_production else "/docs",
    redirect_slashes=False  # Disable automatic redirects to prevent POST data loss
)

# Configure CORS for frontend applications
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ContentApiError, content_api_error_handler)
app.add_exception_handler(OrderValidationError, order_validation_error_handler)
app.add_exception_handler(OrderCodeExhaustedError, order_code_exhausted_handler)

# Include routers
app.include_router(order.router, prefix="/api/orders", tags=["Orders"])
app.include_router(dispatch.router, prefix="/api/orders", tags=["Auto Dispatch"])


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "database": "connected"
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unhealthy"
        )
