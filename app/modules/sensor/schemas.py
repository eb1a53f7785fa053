from pydantic import BaseModel, Field
from typing import Optional, List
from app.modules.bins.schemas import BinResponse
from app.modules.notifications.schemas import NotificationResponse


class SensorReading(BaseModel):
    # One of bin_id / sensor_id identifies the bin
    bin_id: Optional[str] = None
    sensor_id: Optional[str] = None
    fill_level: int = Field(..., ge=0, le=100)
    battery_level: Optional[int] = Field(None, ge=0, le=100)


class SensorIngestResponse(BaseModel):
    message: str
    bin: BinResponse
    notifications: List[NotificationResponse] = []
