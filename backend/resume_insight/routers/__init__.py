from .resumes import router as resumes_router

__all__ = [
    "resumes_router"
]
