import logging

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.db.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str = Field(..., description="'healthy' or 'degraded'", examples=["healthy"])
    service: str = Field(..., description="Service name", examples=["storefront-service"])
    version: str = Field(..., description="Service version", examples=["1.0.0"])
    database: str = Field(..., description="'ok' or 'unavailable'", examples=["ok"])
    events_enabled: bool = Field(..., description="Whether domain events are published to Kafka")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="""
    Liveness and readiness in one call: pings the database with `SELECT 1`.

    Answers 503 with status `degraded` while the database is unreachable, so a
    load balancer stops routing stock updates to an instance that cannot store them.
    """,
    responses={
        200: {"description": "Service and database are up"},
        503: {"description": "Database unreachable"}
    }
)
def health(response: Response, db: Session = Depends(get_db)):
    """Health check endpoint"""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database = "unavailable"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if database == "ok" else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        database=database,
        events_enabled=settings.kafka_enabled
    )
