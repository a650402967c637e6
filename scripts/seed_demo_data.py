"""
Seed demo data for local Notice Board testing.

Usage:
    python scripts/seed_demo_data.py

Or with custom DATABASE_URL:
    DATABASE_URL="postgresql://..." python scripts/seed_demo_data.py

This script creates:
- One admin, two faculty and a few students (if not exist)
- Published, draft and institution-wide notices
- Access tokens for every demo user, printed at the end
"""

import asyncio
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from noticeboard.auth.jwt import create_access_token
from noticeboard.db import get_db_context
from noticeboard.models import (
    ALL_DEPARTMENTS,
    Notice,
    NoticeCategory,
    NoticePriority,
    NoticeStatus,
    User,
    UserRole,
)


# ===== DEMO DATA =====

DEMO_USERS = [
    {"name": "Admin Office", "email": "admin@campus.test", "role": UserRole.ADMIN, "department": None},
    {"name": "Dr. Rao", "email": "rao@campus.test", "role": UserRole.FACULTY, "department": "CSE"},
    {"name": "Dr. Iyer", "email": "iyer@campus.test", "role": UserRole.FACULTY, "department": "ECE"},
    {"name": "Asha", "email": "asha@campus.test", "role": UserRole.STUDENT, "department": "CSE", "year": "3rd Year"},
    {"name": "Ravi", "email": "ravi@campus.test", "role": UserRole.STUDENT, "department": "CSE", "year": "2nd Year"},
    {"name": "Meera", "email": "meera@campus.test", "role": UserRole.STUDENT, "department": "ECE", "year": "3rd Year"},
]

DEMO_NOTICES = [
    {
        "author": "rao@campus.test",
        "title": "Mid-term timetable",
        "content": "Mid-term exams for 3rd year start on Monday. Hall tickets at the office.",
        "category": NoticeCategory.EXAMS,
        "department": "CSE",
        "target_year": "3rd Year",
        "priority": NoticePriority.HIGH,
    },
    {
        "author": "rao@campus.test",
        "title": "Lab rescheduled",
        "content": "The Thursday DBMS lab moves to Friday this week.",
        "category": NoticeCategory.ACADEMIC,
        "department": "CSE",
    },
    {
        "author": "iyer@campus.test",
        "title": "Signals workshop",
        "content": "Hands-on workshop in the ECE seminar hall.",
        "category": NoticeCategory.EVENTS,
        "department": "ECE",
    },
    {
        "author": "admin@campus.test",
        "title": "Campus closed on Friday",
        "content": "The campus stays closed for the public holiday.",
        "category": NoticeCategory.CIRCULARS,
        "department": ALL_DEPARTMENTS,
        "is_pinned": True,
    },
    {
        "author": "rao@campus.test",
        "title": "Project fair (draft)",
        "content": "Details to follow.",
        "category": NoticeCategory.EVENTS,
        "department": "CSE",
        "status": NoticeStatus.DRAFT,
    },
]


async def create_demo_user(db: AsyncSession, data: dict) -> User:
    """Create a demo user unless the email is taken."""
    result = await db.execute(
        select(User).where(User.email == data["email"])
    )
    user = result.scalar_one_or_none()

    if not user:
        user = User(is_active=True, **data)
        db.add(user)
        await db.commit()
        print(f"Created {user.role.value}: {user.name} <{user.email}>")
    else:
        print(f"User already exists: {user.email} (id={user.id})")

    return user


async def create_demo_notice(db: AsyncSession, author: User, data: dict) -> Notice:
    """Create a demo notice unless one with the same title exists."""
    result = await db.execute(
        select(Notice).where(Notice.title == data["title"])
    )
    notice = result.scalar_one_or_none()

    if not notice:
        notice = Notice(author_id=author.id, attachments=[], **data)
        db.add(notice)
        await db.commit()
        print(f"Created notice #{notice.id}: {notice.title} ({notice.department})")
    else:
        print(f"Notice already exists: {notice.title} (id={notice.id})")

    return notice


async def seed_all():
    """Seed all demo data."""
    async with get_db_context() as db:
        print("\n=== Creating demo users ===\n")
        users = {}
        for data in DEMO_USERS:
            user = await create_demo_user(db, data)
            users[user.email] = user

        print("\n=== Creating demo notices ===\n")
        for data in DEMO_NOTICES:
            data = dict(data)
            author = users[data.pop("author")]
            await create_demo_notice(db, author, data)

    print("\n" + "=" * 50)
    print("DEMO DATA CREATED SUCCESSFULLY!")
    print("=" * 50)
    print("\nAccess tokens (Authorization: Bearer <token>):\n")
    for user in users.values():
        print(f"{user.email:<22} {create_access_token(user.id, user.role.value)}")


if __name__ == "__main__":
    asyncio.run(seed_all())
