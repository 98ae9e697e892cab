from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
import logging

from storefront.config import settings
from storefront.db.database import init_db, SessionLocal
from storefront.api import products, reservations, notifications, users, cart, orders, health
from storefront.exceptions import StorefrontError
from storefront.kafka.producer import event_producer
from storefront.services.user_service import UserService

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def bootstrap_admin():
    db = SessionLocal()
    try:
        UserService(db).ensure_admin()
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Storefront Service...")
    if settings.run_migrations_on_startup:
        await init_db()
    else:
        logger.info("RUN_MIGRATIONS_ON_STARTUP is false, skipping migrations")

    bootstrap_admin()

    logger.info(
        f"Kafka events {'enabled' if settings.kafka_enabled else 'disabled'} "
        f"(bootstrap_servers={settings.kafka_bootstrap_servers}, topic={settings.kafka_events_topic})"
    )
    logger.info("Storefront Service started successfully")
    yield
    # Shutdown
    logger.info("Shutting down Storefront Service...")
    event_producer.flush()


app = FastAPI(
    title="Storefront Service",
    description="""
    Product catalog, cart and WhatsApp checkout for the Belleza storefront.

    **Features:**
    - Product browsing (public) and management (admin)
    - Stock ledger with back-in-stock notifications
    - Reservations: ask to be told when a product is available again
    - Server-side cart and WhatsApp checkout
    - Kafka event publishing

    **Authentication:**
    Obtain a token from `/api/users/login` and include it in the Authorization header:
    ```
    Authorization: Bearer <your-jwt-token>
    ```

    **Roles:**
    - **customer**: Cart, reservations, notifications and own orders
    - **admin**: Full access to products, stock and all orders
    """,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS must be registered before routers are hit
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
    max_age=3600,
)


def custom_openapi():
    """Custom OpenAPI schema with JWT Bearer authentication"""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "JWT token from /api/users/login. Format: Bearer <token>"
        }
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi


@app.exception_handler(StorefrontError)
async def storefront_exception_handler(request: Request, exc: StorefrontError):
    """Service errors that a router did not translate itself"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{type(exc).__name__} [{exc.code}]: {exc.message}",
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, **exc.as_dict()}
    )


# Global exception handler for unhandled exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them properly"""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error_type": type(exc).__name__,
        }
    )


# Validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    logger.warning(
        f"Validation error: {exc.errors()}",
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_errors(exc)}
    )


def jsonable_errors(exc: RequestValidationError):
    # pydantic v2 may put exception instances in "ctx"
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(error)
    return errors


# Include routers
app.include_router(health.router)
app.include_router(users.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(reservations.router, prefix="/api")
app.include_router(notifications.router, prefix="/api")
app.include_router(cart.router, prefix="/api")
app.include_router(orders.router, prefix="/api")


@app.get("/")
async def root():
    return {"service": settings.app_name, "version": settings.app_version}
