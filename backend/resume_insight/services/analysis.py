"""
Resume analysis pipeline: LOOKUP -> FETCH -> EXTRACT -> SUMMARIZE -> PERSIST.

Every stage returns a (value, failure) pair. The first failure ends the run and
is reported with its stage and kind; the stored summary is written only when
all stages succeed. Nothing is retried here - callers re-submit the same id.
"""
import asyncio
import logging
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from ..exceptions import ExtractionFailed, GenerationFailed, StorageFetchFailed
from ..models import Resume
from .resume_store import ResumeStore
from .storage import ObjectStoreGateway
from .summary_generator import SummaryGenerator
from .text_extractor import extract_text

logger = logging.getLogger(__name__)


class AnalysisStage(str, Enum):
    LOOKUP = "lookup"
    FETCH = "fetch"
    EXTRACT = "extract"
    SUMMARIZE = "summarize"
    PERSIST = "persist"
    DONE = "done"


class AnalysisErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    UNREADABLE_DOCUMENT = "unreadable_document"
    AI_UNAVAILABLE = "ai_unavailable"
    PERSISTENCE_FAILED = "persistence_failed"
    UNCLASSIFIED = "unclassified"


HTTP_STATUS_BY_KIND = {
    AnalysisErrorKind.NOT_FOUND: 404,
    AnalysisErrorKind.STORAGE_UNAVAILABLE: 502,
    AnalysisErrorKind.UNREADABLE_DOCUMENT: 422,
    AnalysisErrorKind.AI_UNAVAILABLE: 502,
    AnalysisErrorKind.PERSISTENCE_FAILED: 500,
    AnalysisErrorKind.UNCLASSIFIED: 500,
}

USER_MESSAGES = {
    AnalysisErrorKind.NOT_FOUND: "Resume not found.",
    AnalysisErrorKind.STORAGE_UNAVAILABLE: "Could not download resume PDF from storage. Please try again later.",
    AnalysisErrorKind.UNREADABLE_DOCUMENT: "Could not extract text from PDF. Please upload a valid, readable PDF file.",
    AnalysisErrorKind.AI_UNAVAILABLE: "AI analysis failed. Please try again later or check your Gemini API key/quota.",
    AnalysisErrorKind.PERSISTENCE_FAILED: "Failed to save summary to database. Please try again.",
    AnalysisErrorKind.UNCLASSIFIED: "Unexpected server error. Please try again.",
}


@dataclass(frozen=True)
class AnalysisFailure:
    stage: AnalysisStage
    kind: AnalysisErrorKind
    message: str

    @classmethod
    def of(cls, stage: AnalysisStage, kind: AnalysisErrorKind, message: Optional[str] = None) -> "AnalysisFailure":
        return cls(stage=stage, kind=kind, message=message or USER_MESSAGES[kind])

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


@dataclass(frozen=True)
class AnalysisOutcome:
    resume: Optional[Resume] = None
    failure: Optional[AnalysisFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def stage(self) -> AnalysisStage:
        return self.failure.stage if self.failure else AnalysisStage.DONE


# One lock per resume id while any caller holds or waits on it
_resume_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(resume_id: str) -> asyncio.Lock:
    lock = _resume_locks.get(resume_id)
    if lock is None:
        lock = asyncio.Lock()
        _resume_locks[resume_id] = lock
    return lock


class ResumeAnalyzer:
    """
    Runs the analysis pipeline for one resume id at a time.

    Concurrent analyses of the same id inside this process are serialized;
    the last one to finish owns the stored summary.
    """

    def __init__(
        self,
        store: ResumeStore,
        storage: ObjectStoreGateway,
        generator: SummaryGenerator,
        extractor: Callable[[bytes], str] = extract_text,
    ):
        self.store = store
        self.storage = storage
        self.generator = generator
        self.extractor = extractor

    async def analyze(self, resume_id: str, job_description: Optional[str] = None) -> AnalysisOutcome:
        lock = _lock_for(resume_id)
        async with lock:
            return await self._run(resume_id, job_description)

    async def _run(self, resume_id: str, job_description: Optional[str]) -> AnalysisOutcome:
        resume, failure = await self._lookup(resume_id)
        if failure:
            return AnalysisOutcome(failure=failure)

        pdf_bytes, failure = await self._fetch(resume)
        if failure:
            return AnalysisOutcome(failure=failure)

        text, failure = await self._extract(resume_id, pdf_bytes)
        if failure:
            return AnalysisOutcome(failure=failure)

        summary, failure = await self._summarize(resume_id, text, job_description)
        if failure:
            return AnalysisOutcome(failure=failure)

        updated, failure = await self._persist(resume_id, summary)
        if failure:
            return AnalysisOutcome(failure=failure)

        logger.info(f"✅ Resume {resume_id} analyzed ({'with' if job_description and job_description.strip() else 'without'} job description)")
        return AnalysisOutcome(resume=updated)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _lookup(self, resume_id: str) -> Tuple[Optional[Resume], Optional[AnalysisFailure]]:
        try:
            resume = await self.store.find_by_id(resume_id)
        except Exception:
            logger.exception(f"DB error while fetching resume {resume_id}")
            return None, AnalysisFailure.of(
                AnalysisStage.LOOKUP, AnalysisErrorKind.UNCLASSIFIED,
                "Database error while fetching resume.",
            )

        if resume is None:
            logger.error(f"Resume not found for id: {resume_id}")
            return None, AnalysisFailure.of(AnalysisStage.LOOKUP, AnalysisErrorKind.NOT_FOUND)

        if not resume.file_path:
            logger.error(f"Resume {resume_id} has no storage reference")
            return None, AnalysisFailure.of(
                AnalysisStage.LOOKUP, AnalysisErrorKind.UNREADABLE_DOCUMENT,
                "Resume has no stored file. Please upload the PDF again.",
            )

        return resume, None

    async def _fetch(self, resume: Resume) -> Tuple[Optional[bytes], Optional[AnalysisFailure]]:
        try:
            return await self.storage.fetch(resume.file_path), None
        except StorageFetchFailed as e:
            logger.error(f"Failed to fetch resume {resume.id} PDF from storage: {e}")
            return None, AnalysisFailure.of(AnalysisStage.FETCH, AnalysisErrorKind.STORAGE_UNAVAILABLE)
        except Exception:
            logger.exception(f"Unexpected storage error for resume {resume.id}")
            return None, AnalysisFailure.of(AnalysisStage.FETCH, AnalysisErrorKind.UNCLASSIFIED)

    async def _extract(self, resume_id: str, pdf_bytes: bytes) -> Tuple[Optional[str], Optional[AnalysisFailure]]:
        try:
            # PyMuPDF is CPU-bound; keep it off the event loop
            return await asyncio.to_thread(self.extractor, pdf_bytes), None
        except ExtractionFailed as e:
            logger.error(f"PDF parsing failed for resume {resume_id}: {e}")
            return None, AnalysisFailure.of(AnalysisStage.EXTRACT, AnalysisErrorKind.UNREADABLE_DOCUMENT)
        except Exception:
            logger.exception(f"Unexpected extraction error for resume {resume_id}")
            return None, AnalysisFailure.of(AnalysisStage.EXTRACT, AnalysisErrorKind.UNCLASSIFIED)

    async def _summarize(
        self, resume_id: str, text: str, job_description: Optional[str]
    ) -> Tuple[Optional[str], Optional[AnalysisFailure]]:
        try:
            summary = await self.generator.generate_summary(text, job_description)
        except GenerationFailed as e:
            logger.error(f"Gemini API error for resume {resume_id}: {e}")
            return None, AnalysisFailure.of(AnalysisStage.SUMMARIZE, AnalysisErrorKind.AI_UNAVAILABLE)
        except Exception:
            logger.exception(f"Unexpected generation error for resume {resume_id}")
            return None, AnalysisFailure.of(AnalysisStage.SUMMARIZE, AnalysisErrorKind.UNCLASSIFIED)

        if not summary or not summary.strip():
            logger.error(f"Gemini did not return a summary for resume {resume_id}")
            return None, AnalysisFailure.of(AnalysisStage.SUMMARIZE, AnalysisErrorKind.AI_UNAVAILABLE)
        return summary, None

    async def _persist(self, resume_id: str, summary: str) -> Tuple[Optional[Resume], Optional[AnalysisFailure]]:
        try:
            return await self.store.update_summary(resume_id, summary), None
        except Exception:
            logger.exception(f"DB update failed for resume {resume_id}")
            return None, AnalysisFailure.of(AnalysisStage.PERSIST, AnalysisErrorKind.PERSISTENCE_FAILED)
