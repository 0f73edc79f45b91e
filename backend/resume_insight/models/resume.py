"""
Resume model - one uploaded PDF, its storage reference and the latest AI summary.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime
from ..database import Base


def _new_resume_id() -> str:
    return str(uuid.uuid4())


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(String(36), primary_key=True, default=_new_resume_id)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)

    # Set once at upload time (Supabase public URL or /uploads/... path)
    file_path = Column(String(1000), nullable=False)

    # Overwritten by each successful analysis, never appended
    ai_summary = Column(Text, nullable=True)

    uploaded_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
