from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel

class DispatchResult(BaseModel):
    status: Literal["replied", "skipped", "failed"]
    event_type: str
    webhook_event_id: Optional[str] = None
    response: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

class SendMessageRequest(BaseModel):
    targetUserId: Optional[str] = None
    messageText: Optional[str] = None

class SendMessageResponse(BaseModel):
    success: bool
    message: str

class ErrorResponse(BaseModel):
    error: str
