from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LiveDocumentWrite(BaseModel):
    daily_data: Optional[Dict[str, Any]] = Field(None, alias="dailyData")
    hourly_data: Optional[Dict[str, Any]] = Field(None, alias="hourlyData")
    wasted_patterns: Optional[Dict[str, Any]] = Field(None, alias="wastedPatterns")
    manual_patterns: Optional[Dict[str, Any]] = Field(None, alias="manualPatterns")
    reflections: Optional[Dict[str, Any]] = None
    updated_at: Optional[int] = Field(None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def fields(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class LiveDocumentResponse(BaseModel):
    doc_id: str
    version: int
    updated_at: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class LiveDocumentWriteResult(BaseModel):
    ok: bool = True
    version: int
