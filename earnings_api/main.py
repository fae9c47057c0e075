"""Main FastAPI application"""

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from earnings_api.core.config import settings
from earnings_api.core.events import lifespan
from earnings_api.core.exceptions import register_exception_handlers
from earnings_api.core.middleware import setup_middleware
from earnings_api.core.monitoring import router as metrics_router
from earnings_api.middleware.rate_limit import limiter, custom_rate_limit_handler
from earnings_api.api import api_router
from earnings_api.api.health import router as health_router

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Referral earnings and withdrawals API",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)

# Applies RATE_LIMIT_DEFAULT to routes without their own limit
app.add_middleware(SlowAPIMiddleware)

register_exception_handlers(app)
setup_middleware(app)

# Include routers
app.include_router(api_router, prefix="/api")
app.include_router(health_router)
app.include_router(metrics_router)

@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/api/docs",
        "health": "/health"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "earnings_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=settings.WORKERS
    )
