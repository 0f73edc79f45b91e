"""
Migration: Add resumes table.

Run this script against an existing database to create the resumes table
(new databases get it from init_db on startup).
"""
import asyncio
from sqlalchemy import text
from resume_insight.database import engine


async def migrate():
    """Create the resumes table."""

    # Execute each statement separately (asyncpg requirement)
    statements = [
        """
        CREATE TABLE IF NOT EXISTS resumes (
            id VARCHAR(36) PRIMARY KEY,
            full_name VARCHAR(255),
            email VARCHAR(255),
            file_path VARCHAR(1000) NOT NULL,
            ai_summary TEXT,
            uploaded_at TIMESTAMP WITH TIME ZONE NOT NULL
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_resumes_uploaded_at ON resumes(uploaded_at)"
    ]

    async with engine.begin() as conn:
        for sql in statements:
            await conn.execute(text(sql))
        print("✅ Created resumes table and indexes")


if __name__ == "__main__":
    print("Running migration: Add resumes table...")
    asyncio.run(migrate())
    print("Migration complete!")
