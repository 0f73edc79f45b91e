"""
Resume record persistence on top of an AsyncSession.
"""
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Resume


class ResumeStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, file_path: str, full_name: Optional[str] = None, email: Optional[str] = None) -> Resume:
        resume = Resume(full_name=full_name, email=email, file_path=file_path)
        self.db.add(resume)
        await self.db.commit()
        await self.db.refresh(resume)
        return resume

    async def find_by_id(self, resume_id: str) -> Optional[Resume]:
        result = await self.db.execute(select(Resume).where(Resume.id == resume_id))
        return result.scalar_one_or_none()

    async def list_page(self, page: int, limit: int) -> Tuple[List[Resume], int]:
        """Newest uploads first."""
        result = await self.db.execute(
            select(Resume)
            .order_by(Resume.uploaded_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        resumes = list(result.scalars().all())
        total = await self.db.scalar(select(func.count()).select_from(Resume))
        return resumes, total or 0

    async def update_contact(self, resume: Resume, full_name: Optional[str], email: Optional[str]) -> Resume:
        if full_name is not None:
            resume.full_name = full_name
        if email is not None:
            resume.email = email
        await self.db.commit()
        await self.db.refresh(resume)
        return resume

    async def update_summary(self, resume_id: str, summary: str) -> Resume:
        """Replace the stored summary. Rolls back and re-raises on any failure."""
        try:
            resume = await self.find_by_id(resume_id)
            if resume is None:
                raise LookupError(f"Resume {resume_id} disappeared before its summary was saved")
            resume.ai_summary = summary
            await self.db.commit()
            await self.db.refresh(resume)
            return resume
        except Exception:
            await self.db.rollback()
            raise

    async def delete(self, resume: Resume) -> None:
        await self.db.delete(resume)
        await self.db.commit()
