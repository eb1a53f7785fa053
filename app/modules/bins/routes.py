from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase_admin
from app.modules.bins.schemas import (
    BinCreate, BinUpdate, BinResponse, BinListResponse,
    NearbyBinListResponse, BinDetailResponse
)
from app.modules.bins.service import BinService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict, Optional, Literal

router = APIRouter(prefix="/bins", tags=["bins"])


def get_bin_service(supabase: Client = Depends(get_supabase_admin)) -> BinService:
    return BinService(supabase)


@router.get("", response_model=BinListResponse)
async def list_bins(
    status: Optional[Literal["normal", "warning", "full"]] = None,
    search: Optional[str] = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: BinService = Depends(get_bin_service)
):
    """List bins (public)"""
    return service.list_bins(status=status, search=search, limit=limit, offset=offset)


# Declared before /{bin_id} so "search" is not taken as an id
@router.get("/search/nearby", response_model=NearbyBinListResponse)
async def nearby_bins(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: float = Query(5, gt=0, le=100, description="Search radius in km"),
    service: BinService = Depends(get_bin_service)
):
    """Bins within a radius of a point, nearest first"""
    return service.find_nearby(latitude, longitude, radius)


@router.get("/{bin_id}", response_model=BinDetailResponse)
async def get_bin(
    bin_id: str,
    service: BinService = Depends(get_bin_service)
):
    """Bin detail with field officer and recent notifications"""
    return {"bin": service.get_bin_detail(bin_id)}


@router.post("", response_model=BinResponse, status_code=201)
async def create_bin(
    bin_data: BinCreate,
    user_data: Dict = Depends(require_permission("bins:create")),
    service: BinService = Depends(get_bin_service)
):
    """Register a new bin (field officers and admins)"""
    return service.create_bin(bin_data)


@router.put("/{bin_id}", response_model=BinResponse)
async def update_bin(
    bin_id: str,
    bin_data: BinUpdate,
    user_data: Dict = Depends(require_permission("bins:update")),
    service: BinService = Depends(get_bin_service)
):
    """Edit a bin; status follows fill_level"""
    return service.update_bin(bin_id, bin_data)


@router.delete("/{bin_id}", status_code=204)
async def delete_bin(
    bin_id: str,
    user_data: Dict = Depends(require_permission("bins:delete")),
    service: BinService = Depends(get_bin_service)
):
    service.delete_bin(bin_id)
    return None
