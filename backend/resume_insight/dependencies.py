"""
FastAPI dependencies wiring the shared gateway and generator (built once at
startup in the lifespan handler) into per-request services.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .database import get_db
from .services.analysis import ResumeAnalyzer
from .services.resume_store import ResumeStore
from .services.storage import ObjectStoreGateway
from .services.summary_generator import SummaryGenerator


def get_storage(request: Request) -> ObjectStoreGateway:
    return request.app.state.storage


def get_summary_generator(request: Request) -> SummaryGenerator:
    return request.app.state.summary_generator


def get_resume_store(db: AsyncSession = Depends(get_db)) -> ResumeStore:
    return ResumeStore(db)


def get_resume_analyzer(
    store: ResumeStore = Depends(get_resume_store),
    storage: ObjectStoreGateway = Depends(get_storage),
    generator: SummaryGenerator = Depends(get_summary_generator),
) -> ResumeAnalyzer:
    return ResumeAnalyzer(store=store, storage=storage, generator=generator)
