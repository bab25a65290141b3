"""
Request and response bodies for the HTTP API.
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from showfinder.schemas.show import QualityScore, ShowRecord
from showfinder.services.field_parser import ParsedShow

class ParseRequest(BaseModel):
    """Raw scraped text to parse."""
    text: str = Field(min_length=1)

class ParseResponse(BaseModel):
    """Parsed fields plus a review score for the resulting record."""
    parsed: ParsedShow
    record: ShowRecord
    quality: QualityScore

class ShowPairRequest(BaseModel):
    """Two shows to compare."""
    first: ShowRecord
    second: ShowRecord
    require_same_series: bool = Field(
        default=True,
        description="Only predict a next date when the pair scores as one series"
    )

class DuplicateRequest(BaseModel):
    """Submissions to scan for duplicates."""
    shows: List[ShowRecord]
    threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    max_results: Optional[int] = Field(default=100, ge=1)
