"""
Request and response models for the Person Directory service.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ResolveRequest(BaseModel):
    """Request model for attribute resolution."""
    seed: Dict[str, Any] = Field(..., description="Known attributes of the person")


class ResolveResponse(BaseModel):
    """Resolved attribute record."""
    attributes: Dict[str, List[Any]] = Field(default_factory=dict)


class AttributeNamesResponse(BaseModel):
    names: List[str] = Field(default_factory=list)


class CacheStatsResponse(BaseModel):
    """Counters of the caching decorator."""
    queries: int
    misses: int
    hits: int
