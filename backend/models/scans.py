from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GenerateRequest(BaseModel):
    text: str = Field(..., description="Text to encode, UTF-8")
    level: Optional[str] = Field(default=None, examples=["L", "M", "Q", "H"])
    scale: Optional[int] = Field(default=None, ge=1, le=64, description="Pixels per module")
    border: int = Field(default=4, ge=0, le=16, description="Quiet zone in modules")


class DecodeResponse(BaseModel):
    strings: List[str] = Field(default_factory=list, description="Empty when no code was found")


class ScanReport(BaseModel):
    """
    Sent by the live scanner whenever a frame held at least one code.
    """
    strings: List[str] = Field(..., min_length=1)
    camera_position: Optional[Literal["back", "front"]] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class ScanEntry(ScanReport):
    scan_id: int
    received_at: datetime = Field(default_factory=_utcnow)
