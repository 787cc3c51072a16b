from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class GoLiveCompletion(BaseModel):
    """Schema for the completion event of a go-live installment"""
    completion_date: date
    # Days between completion and due date; the configured default applies when omitted
    offset_days: Optional[int] = Field(default=None, ge=0)
