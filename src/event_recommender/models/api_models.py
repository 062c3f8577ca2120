"""
API request and response models for FastAPI endpoints.

This module defines the Pydantic models used for API request/response validation.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .events import EventKeyData, TagRecommendations
from .keyphrases import RawDocument


class ExtractKeyphrasesRequest(BaseModel):
    """Request model for keyphrase extraction."""

    document: RawDocument = Field(description="Event text to extract keyphrases from")


class ExtractKeyDataRequest(BaseModel):
    """Request model for building an EventKeyData projection."""

    id: str
    title: str = ""
    detail: str = ""


class CacheStatsResponse(BaseModel):
    """Result cache statistics."""

    size: int = Field(description="Number of live entries", ge=0)
    keys: List[str] = Field(default_factory=list)


class RecommendByTagsRequest(BaseModel):
    """Request model for per-tag recommendations over pre-filtered events."""

    tags: List[str] = Field(default_factory=list, description="User interest tags")
    events: List[EventKeyData] = Field(default_factory=list)


class RecommendByTagsResponse(BaseModel):
    """Response model for per-tag recommendations."""

    success: bool = True
    message: Optional[str] = None
    data: List[TagRecommendations] = Field(default_factory=list)


class RecommendByMessageRequest(BaseModel):
    """Request model for free-text recommendations."""

    message: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    events: List[EventKeyData] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status", examples=["healthy"])
    version: str = Field(description="API version", examples=["1.0.0"])
    uptime_seconds: float = Field(description="Service uptime")


class VersionResponse(BaseModel):
    """Version information response."""

    model_config = ConfigDict(protected_namespaces=())

    api_version: str = Field(description="API version")
    component_versions: Dict[str, str] = Field(description="Versions of pipeline components")
