from .text_extractor import extract_text
from .summary_generator import (
    SummaryGenerator,
    PromptMode,
    build_prompt,
    select_prompt_mode,
    FIT_LABELS,
    HIRE_LABELS
)
from .storage import (
    ObjectStoreGateway,
    sanitize_filename,
    storage_key
)
from .resume_store import ResumeStore
from .analysis import (
    ResumeAnalyzer,
    AnalysisStage,
    AnalysisErrorKind,
    AnalysisFailure,
    AnalysisOutcome
)

__all__ = [
    # Extraction
    "extract_text",
    # Summary generation
    "SummaryGenerator",
    "PromptMode",
    "build_prompt",
    "select_prompt_mode",
    "FIT_LABELS",
    "HIRE_LABELS",
    # Object storage
    "ObjectStoreGateway",
    "sanitize_filename",
    "storage_key",
    # Records
    "ResumeStore",
    # Analysis pipeline
    "ResumeAnalyzer",
    "AnalysisStage",
    "AnalysisErrorKind",
    "AnalysisFailure",
    "AnalysisOutcome"
]
