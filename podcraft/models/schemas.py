from pydantic import BaseModel, Field, validator
from typing import List, Optional, Dict, Any

# Request Models
class ScrapeRequest(BaseModel):
    url: str = Field(..., max_length=2048, description="Article URL to extract content from")
    provider: Optional[str] = Field(None, description="Preferred extractor (trafilatura, soup or auto)")

    @validator('url')
    def validate_url(cls, v):
        return v.strip()

class GenerateRequest(BaseModel):
    content: str = Field(..., max_length=200000, description="Source material for the podcast script")
    style: str = Field("conversational", description="conversational, professional, educational or entertaining")
    duration: str = Field("medium", description="short, medium or long")
    tone: str = Field("friendly", description="friendly, formal, humorous or dramatic")
    audience: str = Field("general", max_length=200, description="Intended listeners")
    provider: Optional[str] = Field(None, description="Preferred generation provider or auto")

    @validator('style', 'duration', 'tone')
    def normalize_choice(cls, v):
        return v.strip().lower()

class SynthesizeRequest(BaseModel):
    script: str = Field(..., max_length=200000, description="Podcast script to narrate")
    voice_id: Optional[str] = Field(None, description="Voice name from /voices or a provider voice id")
    provider: Optional[str] = Field(None, description="Preferred TTS provider or auto")
    stability: Optional[float] = Field(None, ge=0.0, le=1.0, description="Base voice stability")
    similarity_boost: Optional[float] = Field(None, ge=0.0, le=1.0, description="Voice similarity boost")
    enhance: bool = Field(True, description="Run the audio enhancement filter graph when enabled")

# Response Models
class ErrorDetail(BaseModel):
    code: str
    severity: str
    message: str
    suggestion: str
    retryable: bool
    attempted_providers: List[str] = Field(default_factory=list)

class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
    metadata: Dict[str, Any] = Field(default_factory=dict)

class ScrapeResponse(BaseModel):
    success: bool = True
    title: str
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

class ScriptSection(BaseModel):
    type: str
    content: str

class GenerateResponse(BaseModel):
    success: bool = True
    script: str
    sections: List[ScriptSection] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

class SynthesizeResponse(BaseModel):
    success: bool = True
    audio_url: str = Field(..., description="Locator of the stored audio file")
    metadata: Dict[str, Any] = Field(default_factory=dict)

class VoicesResponse(BaseModel):
    default_voice: str
    voices: Dict[str, Dict[str, str]]

class ErrorStatsResponse(BaseModel):
    total: int
    by_code: Dict[str, int]
    by_severity: Dict[str, int]
    recent: List[Dict[str, Any]]
    healthy: bool
