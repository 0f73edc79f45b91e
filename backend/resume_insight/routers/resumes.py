import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Query, Response, UploadFile, status

from ..config import get_settings
from ..dependencies import get_resume_analyzer, get_resume_store, get_storage
from ..exceptions import StorageUploadFailed
from ..schemas.resume import AnalyzeRequest, ResumeListResponse, ResumeResponse, ResumeUpdate
from ..services.analysis import ResumeAnalyzer
from ..services.resume_store import ResumeStore
from ..services.storage import ObjectStoreGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resumes", tags=["Resumes"])


def _is_pdf(file: UploadFile) -> bool:
    if file.content_type == "application/pdf":
        return True
    return bool(file.filename) and file.filename.lower().endswith(".pdf")


@router.post("", response_model=ResumeResponse, status_code=status.HTTP_201_CREATED)
async def upload_resume(
    resume: UploadFile = File(...),
    full_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    store: ResumeStore = Depends(get_resume_store),
    storage: ObjectStoreGateway = Depends(get_storage),
):
    """
    Upload a PDF resume.

    The file is stored first; the record is created only once storage
    succeeded, so a failed upload never leaves a record behind.
    """
    settings = get_settings()

    if not _is_pdf(resume):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only PDF files are allowed."
        )

    pdf_bytes = await resume.read()
    if len(pdf_bytes) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"PDF file size must be {settings.max_upload_mb}MB or less."
        )

    try:
        file_path = await storage.upload(pdf_bytes, resume.filename, content_type="application/pdf")
    except StorageUploadFailed as e:
        logger.error(f"Resume upload failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save resume file. Please try again."
        )

    return await store.create(file_path=file_path, full_name=full_name, email=email)


@router.get("", response_model=ResumeListResponse)
async def list_resumes(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    store: ResumeStore = Depends(get_resume_store),
):
    """List resumes, newest upload first"""
    resumes, total = await store.list_page(page, limit)
    return ResumeListResponse(
        resumes=[ResumeResponse.model_validate(resume) for resume in resumes],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/{resume_id}", response_model=ResumeResponse)
async def get_resume(resume_id: str, store: ResumeStore = Depends(get_resume_store)):
    resume = await store.find_by_id(resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")
    return resume


@router.put("/{resume_id}", response_model=ResumeResponse)
async def update_resume(
    resume_id: str,
    update: ResumeUpdate,
    store: ResumeStore = Depends(get_resume_store),
):
    """Update contact fields"""
    resume = await store.find_by_id(resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")
    return await store.update_contact(resume, full_name=update.full_name, email=update.email)


@router.delete("/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resume(resume_id: str, store: ResumeStore = Depends(get_resume_store)):
    """Delete the record. The stored PDF is left in object storage."""
    resume = await store.find_by_id(resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")
    await store.delete(resume)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/analyze/{resume_id}", response_model=ResumeResponse)
async def analyze_resume(
    resume_id: str,
    payload: Optional[AnalyzeRequest] = Body(None),
    analyzer: ResumeAnalyzer = Depends(get_resume_analyzer),
):
    """
    Run the analysis pipeline and return the updated resume.

    404 unknown id, 422 unreadable PDF, 502 storage or AI outage,
    500 persistence or unexpected failure.
    """
    job_description = payload.job_description if payload else None
    outcome = await analyzer.analyze(resume_id, job_description)
    if not outcome.ok:
        raise HTTPException(status_code=outcome.failure.status_code, detail=outcome.failure.message)
    return outcome.resume
