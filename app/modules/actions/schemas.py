from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from app.modules.bins.schemas import BinResponse


class EmptyBinRequest(BaseModel):
    bin_id: Optional[str] = None
    notes: Optional[str] = None


class ActionResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    bin_id: Optional[str] = None
    action: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmptyBinResponse(BaseModel):
    message: str
    action: ActionResponse
    bin: Optional[BinResponse] = None


class ActionHistoryResponse(BaseModel):
    history: List[ActionResponse]
    limit: int
    offset: int
