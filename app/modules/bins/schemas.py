from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime
from app.modules.users.schemas import OfficerSummary


class BinCreate(BaseModel):
    name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    fill_level: int = Field(0, ge=0, le=100)
    battery_level: Optional[int] = Field(None, ge=0, le=100)
    sensor_id: Optional[str] = None
    capacity: Optional[int] = Field(None, gt=0)
    notes: Optional[str] = None
    field_officer_id: Optional[str] = None


class BinUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    fill_level: Optional[int] = Field(None, ge=0, le=100)
    battery_level: Optional[int] = Field(None, ge=0, le=100)
    sensor_id: Optional[str] = None
    capacity: Optional[int] = Field(None, gt=0)
    notes: Optional[str] = None
    field_officer_id: Optional[str] = None


class BinResponse(BaseModel):
    id: str
    name: str
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    fill_level: int = 0
    status: Literal["normal", "warning", "full"] = "normal"
    battery_level: Optional[int] = None
    sensor_id: Optional[str] = None
    capacity: Optional[int] = None
    notes: Optional[str] = None
    images: Optional[List[str]] = None
    field_officer_id: Optional[str] = None
    last_collection: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NearbyBinResponse(BinResponse):
    distance: float  # km from the query point


class BinListResponse(BaseModel):
    bins: List[BinResponse]
    count: int


class NearbyBinListResponse(BaseModel):
    bins: List[NearbyBinResponse]
    count: int


class RecentNotification(BaseModel):
    id: str
    message: str
    type: str
    read: bool = False
    created_at: Optional[datetime] = None


class BinDetail(BinResponse):
    field_officer: Optional[OfficerSummary] = Field(None, alias="fieldOfficer")
    recent_notifications: List[RecentNotification] = Field(default_factory=list, alias="recentNotifications")

    class Config:
        from_attributes = True
        populate_by_name = True


class BinDetailResponse(BaseModel):
    bin: BinDetail
