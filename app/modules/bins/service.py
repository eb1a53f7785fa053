from supabase import Client
from app.config import settings
from app.core.validators import is_uuid, is_unique_violation, derive_bin_status
from app.modules.bins.schemas import (
    BinCreate, BinUpdate, BinResponse, BinListResponse, BinDetail,
    NearbyBinResponse, NearbyBinListResponse, RecentNotification
)
from app.modules.users.service import UserService
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging
import math
import re

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
RECENT_NOTIFICATIONS_LIMIT = 5

# Characters that carry meaning inside a PostgREST or=() filter
_FILTER_UNSAFE = re.compile(r"[,()*%]")


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates in km"""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def status_for(fill_level: float) -> str:
    return derive_bin_status(fill_level, settings.bin_warning_threshold, settings.bin_full_threshold)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BinService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_bins(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> BinListResponse:
        """List bins by name, optionally filtered by status and a name/location search"""
        try:
            query = self.supabase.table("trash_bins").select("*", count="exact")
            if status:
                query = query.eq("status", status)
            term = _FILTER_UNSAFE.sub(" ", search or "").strip()
            if term:
                query = query.or_(f"name.ilike.%{term}%,location.ilike.%{term}%")
            result = query\
                .order("name")\
                .range(offset, offset + limit - 1)\
                .execute()
        except Exception as e:
            logger.error(f"Error listing bins: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch bins")

        bins = [BinResponse(**row) for row in result.data or []]
        count = result.count if result.count is not None else len(bins)
        return BinListResponse(bins=bins, count=count)

    def find_nearby(self, latitude: float, longitude: float, radius_km: float) -> NearbyBinListResponse:
        """Bins within radius_km of a point, nearest first"""
        try:
            result = self.supabase.table("trash_bins")\
                .select("*")\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching bins for nearby search: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch bins")

        nearby = []
        for row in result.data or []:
            if row.get("latitude") is None or row.get("longitude") is None:
                continue
            distance = haversine_km(latitude, longitude, row["latitude"], row["longitude"])
            if distance <= radius_km:
                nearby.append(NearbyBinResponse(**row, distance=round(distance, 3)))
        nearby.sort(key=lambda b: b.distance)
        return NearbyBinListResponse(bins=nearby, count=len(nearby))

    def get_bin_row(self, bin_id: str) -> Dict[str, Any]:
        """Raw trash_bins row; 404 when missing (including malformed ids)"""
        if not is_uuid(bin_id):
            raise HTTPException(status_code=404, detail="Bin not found")
        try:
            result = self.supabase.table("trash_bins")\
                .select("*")\
                .eq("id", bin_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching bin {bin_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch bin")
        if not result.data:
            raise HTTPException(status_code=404, detail="Bin not found")
        return result.data[0]

    def get_bin_detail(self, bin_id: str) -> BinDetail:
        """Bin with its field officer and latest notifications"""
        row = self.get_bin_row(bin_id)
        officer = UserService(self.supabase).get_officer(row.get("field_officer_id"))

        recent: List[RecentNotification] = []
        try:
            notifications = self.supabase.table("notifications")\
                .select("id, message, type, read, created_at")\
                .eq("bin_id", bin_id)\
                .order("created_at", desc=True)\
                .limit(RECENT_NOTIFICATIONS_LIMIT)\
                .execute()
            recent = [RecentNotification(**n) for n in notifications.data or []]
        except Exception as e:
            logger.warning(f"Error fetching notifications for bin {bin_id}: {e}")

        return BinDetail(**row, field_officer=officer, recent_notifications=recent)

    def create_bin(self, bin_data: BinCreate) -> BinResponse:
        now = _now()
        row = bin_data.model_dump()
        row.update({
            "status": status_for(bin_data.fill_level),
            "created_at": now,
            "updated_at": now,
        })
        try:
            result = self.supabase.table("trash_bins").insert(row).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise HTTPException(status_code=409, detail="sensor_id is already assigned to another bin")
            logger.error(f"Error creating bin: {e}")
            raise HTTPException(status_code=500, detail="Failed to create bin")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create bin")
        logger.info(f"Created bin {result.data[0]['id']} ({bin_data.name})")
        return BinResponse(**result.data[0])

    def update_bin(self, bin_id: str, bin_data: BinUpdate) -> BinResponse:
        update_data = bin_data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        if update_data.get("fill_level") is not None:
            update_data["status"] = status_for(update_data["fill_level"])
        return self.update_fields(bin_id, update_data)

    def reset_bin(self, bin_id: str) -> BinResponse:
        """Mark a bin as emptied"""
        now = _now()
        return self.update_fields(bin_id, {
            "fill_level": 0,
            "status": "normal",
            "last_collection": now,
        })

    def update_fields(self, bin_id: str, update_data: Dict[str, Any]) -> BinResponse:
        if not is_uuid(bin_id):
            raise HTTPException(status_code=404, detail="Bin not found")
        update_data["updated_at"] = _now()
        try:
            result = self.supabase.table("trash_bins")\
                .update(update_data)\
                .eq("id", bin_id)\
                .execute()
        except Exception as e:
            if is_unique_violation(e):
                raise HTTPException(status_code=409, detail="sensor_id is already assigned to another bin")
            logger.error(f"Error updating bin {bin_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update bin")
        if not result.data:
            raise HTTPException(status_code=404, detail="Bin not found")
        return BinResponse(**result.data[0])

    def delete_bin(self, bin_id: str) -> None:
        if not is_uuid(bin_id):
            raise HTTPException(status_code=404, detail="Bin not found")
        try:
            result = self.supabase.table("trash_bins")\
                .delete()\
                .eq("id", bin_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting bin {bin_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete bin")
        if not result.data:
            raise HTTPException(status_code=404, detail="Bin not found")
        logger.info(f"Deleted bin {bin_id}")
