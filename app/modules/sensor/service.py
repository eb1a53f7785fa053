from supabase import Client
from app.config import settings
from app.core.validators import is_uuid
from app.modules.bins.service import BinService, status_for
from app.modules.notifications.schemas import NotificationResponse
from app.modules.notifications.service import NotificationService
from app.modules.sensor.schemas import SensorReading, SensorIngestResponse
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

STATUS_SEVERITY = {"normal": 0, "warning": 1, "full": 2}
STATUS_NOTIFICATION_TYPE = {"warning": "warning", "full": "critical"}


class SensorService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.bins = BinService(supabase)
        self.notifications = NotificationService(supabase)

    def ingest(self, reading: SensorReading) -> SensorIngestResponse:
        """Apply a sensor reading to its bin and raise alerts on escalation"""
        bin_row = self._resolve_bin(reading)
        previous_status = bin_row.get("status") or "normal"
        previous_battery = bin_row.get("battery_level")

        update_data: Dict[str, Any] = {
            "fill_level": reading.fill_level,
            "status": status_for(reading.fill_level),
        }
        if reading.battery_level is not None:
            update_data["battery_level"] = reading.battery_level
        updated = self.bins.update_fields(bin_row["id"], update_data)

        alerts: List[NotificationResponse] = []
        new_status = updated.status
        if STATUS_SEVERITY[new_status] > STATUS_SEVERITY.get(previous_status, 0):
            message = f"{updated.name} ({updated.location}) is {updated.fill_level:g}% full"
            if new_status == "full":
                message += " and needs collection now"
            alerts.append(self._alert(updated.id, message, STATUS_NOTIFICATION_TYPE[new_status]))

        if self._battery_dropped_low(previous_battery, reading.battery_level):
            message = f"{updated.name} sensor battery low ({reading.battery_level:g}%)"
            alerts.append(self._alert(updated.id, message, "info"))

        logger.debug(f"Reading for bin {updated.id}: fill={reading.fill_level} status={new_status}")
        return SensorIngestResponse(message="Reading recorded", bin=updated, notifications=alerts)

    def _resolve_bin(self, reading: SensorReading) -> Dict[str, Any]:
        if reading.bin_id:
            if not is_uuid(reading.bin_id):
                raise HTTPException(status_code=400, detail="bin_id must be a UUID")
            return self.bins.get_bin_row(reading.bin_id)
        if not reading.sensor_id:
            raise HTTPException(status_code=400, detail="Missing bin_id or sensor_id")
        try:
            result = self.supabase.table("trash_bins")\
                .select("*")\
                .eq("sensor_id", reading.sensor_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error resolving sensor {reading.sensor_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to record reading")
        if not result.data:
            raise HTTPException(status_code=404, detail=f"No bin registered for sensor {reading.sensor_id}")
        return result.data[0]

    @staticmethod
    def _battery_dropped_low(previous: Optional[int], current: Optional[int]) -> bool:
        threshold = settings.low_battery_threshold
        if current is None or current >= threshold:
            return False
        return previous is None or previous >= threshold

    def _alert(self, bin_id: str, message: str, notification_type: str) -> NotificationResponse:
        row = self.notifications.insert(bin_id, message, notification_type)
        logger.info(f"{notification_type} alert for bin {bin_id}: {message}")
        return NotificationResponse(**row)
