"""
Resume schemas for upload, listing, updates and analysis
"""
from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class ResumeResponse(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    file_path: str
    ai_summary: Optional[str] = None
    uploaded_at: datetime

    class Config:
        from_attributes = True


class ResumeListResponse(BaseModel):
    resumes: List[ResumeResponse]
    total: int
    page: int
    limit: int


class ResumeUpdate(BaseModel):
    """Contact fields only - storage reference and summary are not caller-writable."""
    full_name: Optional[str] = None
    email: Optional[str] = None


class AnalyzeRequest(BaseModel):
    job_description: Optional[str] = Field(default=None, alias="jobDescription")

    class Config:
        populate_by_name = True
