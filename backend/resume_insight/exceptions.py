"""
Domain errors raised by the storage, extraction and generation services.

The analysis pipeline catches these at each stage boundary and turns them
into an AnalysisErrorKind; they never reach HTTP callers directly.
"""


class ResumeInsightError(Exception):
    """Base class for service-level failures."""


class ExtractionFailed(ResumeInsightError):
    """PDF bytes could not be parsed or contained no text."""


class GenerationFailed(ResumeInsightError):
    """The language model call failed or returned no summary."""


class StorageFetchFailed(ResumeInsightError):
    """The stored resume binary could not be retrieved."""


class StorageUploadFailed(ResumeInsightError):
    """The resume binary could not be written to any storage backend."""
