from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from app.database.supabase_client import get_supabase_admin
from app.core.rate_limit import limiter
from supabase import Client
from typing import Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


def get_probe_client() -> Optional[Client]:
    """Service client for the probes; None when it cannot be built (missing URL or key)"""
    try:
        return get_supabase_admin()
    except Exception as e:
        logger.warning(f"Supabase client unavailable: {e}")
        return None


def probe_database(supabase: Optional[Client]) -> bool:
    """One-row read against trash_bins"""
    if supabase is None:
        return False
    try:
        supabase.table("trash_bins").select("id").limit(1).execute()
        return True
    except Exception as e:
        logger.warning(f"Database probe failed: {e}")
        return False


@router.get("")
@limiter.exempt
async def health(supabase: Optional[Client] = Depends(get_probe_client)):
    """Liveness: always 200, reports whether the database answered"""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected" if probe_database(supabase) else "unavailable",
    }


@router.get("/ready")
@limiter.exempt
async def ready(supabase: Optional[Client] = Depends(get_probe_client)):
    """Readiness probe: 503 until the database answers"""
    if probe_database(supabase):
        return {"status": "ready"}
    return JSONResponse(status_code=503, content={"status": "unavailable"})
