from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ApiRequest(BaseModel):
    """
    Base for inbound JSON bodies.

    Accepts both the camelCase names browsers send and snake_case.
    Required text fields are Optional here so that a missing field is
    reported by the handler as "<field> required".
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ChatRequest(ApiRequest):
    """Body of /api/chat and /api/stream-fetch."""
    session_id: Optional[str] = Field(default=None, alias="sessionId", description="Caller-chosen session id")
    subject: Optional[str] = Field(default="General", description="Subject being studied")
    mode: Optional[str] = Field(default="concise", description="'deep' for step-by-step answers")
    tone: Optional[str] = Field(default="teaching", description="Answer tone")
    message: Optional[str] = Field(default=None, description="User's message")


class QuizRequest(ApiRequest):
    topic: Optional[str] = None
    count: int = Field(default=5, ge=1, le=50)
    difficulty: str = "medium"


class FlashcardsRequest(ApiRequest):
    topic: Optional[str] = None
    count: int = Field(default=10, ge=1, le=100)


class SummarizeRequest(ApiRequest):
    text: Optional[str] = None
    length: str = "short"


class TranslateRequest(ApiRequest):
    text: Optional[str] = None
    target_language: Optional[str] = Field(default=None, alias="targetLanguage")
    source_language: Optional[str] = Field(default=None, alias="sourceLanguage")


class EssayGradeRequest(ApiRequest):
    essay: Optional[str] = None
    question: Optional[str] = None
    level: str = "high school"


class ReferenceRequest(ApiRequest):
    source: Optional[str] = None
    style: str = "APA"


class HintRequest(ApiRequest):
    problem: Optional[str] = None
    subject: str = "General"


class ResourcesRequest(ApiRequest):
    topic: Optional[str] = None
    level: str = "beginner"
