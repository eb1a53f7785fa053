import secrets
from fastapi import APIRouter, Depends, Header, HTTPException, status
from app.config import settings
from app.database.supabase_client import get_supabase_admin
from app.modules.sensor.schemas import SensorReading, SensorIngestResponse
from app.modules.sensor.service import SensorService
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/sensor", tags=["sensor"])


def get_sensor_service(supabase: Client = Depends(get_supabase_admin)) -> SensorService:
    return SensorService(supabase)


def verify_sensor_key(x_sensor_key: Optional[str] = Header(None)) -> None:
    """Sensors authenticate with a shared key when one is configured"""
    if not settings.sensor_api_key:
        return
    if not x_sensor_key or not secrets.compare_digest(x_sensor_key, settings.sensor_api_key):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid sensor key")


@router.post("/data", response_model=SensorIngestResponse, dependencies=[Depends(verify_sensor_key)])
async def ingest_reading(
    reading: SensorReading,
    service: SensorService = Depends(get_sensor_service)
):
    """Receive a fill/battery reading from a bin sensor"""
    return service.ingest(reading)
