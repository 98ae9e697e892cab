from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class ReservationCreate(BaseModel):
    product_id: int = Field(..., description="Out-of-stock product to be notified about")


class ReservationResponse(BaseModel):
    id: int
    product_id: int
    user_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReservationStatusResponse(BaseModel):
    product_id: int
    reserved: bool
