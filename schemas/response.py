from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ApiResponse(BaseModel):
    """Base for outbound bodies; serialized by alias (camelCase)."""
    model_config = ConfigDict(populate_by_name=True)


class ChatResponse(ApiResponse):
    reply: str = Field(..., description="Assistant reply text")
    meta: Dict[str, Any] = Field(default_factory=dict, description="Model/version details")


class MessageOut(ApiResponse):
    role: str
    content: str


class HistoryResponse(ApiResponse):
    session_id: str = Field(..., alias="sessionId")
    messages: List[MessageOut] = Field(default_factory=list)


class ClearResponse(ApiResponse):
    ok: bool = True
    session_id: str = Field(..., alias="sessionId")


class QuizResponse(ApiResponse):
    """Parsed quiz, or the raw model text when it was not valid JSON."""
    quiz: Optional[Any] = None
    raw: Optional[str] = None


class FlashcardsResponse(ApiResponse):
    flashcards: Optional[Any] = None
    raw: Optional[str] = None


class UploadResponse(ApiResponse):
    """PDF uploads carry extracted text and summary; other files only names."""
    ok: bool = True
    filename: Optional[str] = None
    originalname: Optional[str] = None
    extracted_text: Optional[str] = None
    summary: Optional[str] = None
