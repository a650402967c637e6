"""
Tests for the notice visibility predicate.
"""

import pytest
from sqlalchemy import select

from noticeboard.models import ALL_DEPARTMENTS, Notice, NoticeCategory, NoticeStatus, UserRole
from noticeboard.services.visibility import (
    notice_ordering,
    single_notice_predicate,
    visible_notices_predicate,
)


async def _visible_titles(db, viewer=None, **filters) -> set[str]:
    result = await db.execute(
        select(Notice.title).where(visible_notices_predicate(viewer, **filters))
    )
    return set(result.scalars().all())


@pytest.fixture
def board(make_user, make_notice):
    """A small board covering departments, years and statuses."""
    async def _build():
        faculty = await make_user("Dr. Rao", role=UserRole.FACULTY, department="CSE")
        await make_notice(faculty, title="cse-3rd", target_year="3rd Year")
        await make_notice(faculty, title="cse-2nd", target_year="2nd Year")
        await make_notice(faculty, title="cse-any", target_year=None)
        await make_notice(faculty, title="ece", department="ECE")
        await make_notice(faculty, title="everyone", department=ALL_DEPARTMENTS, category=NoticeCategory.EVENTS)
        await make_notice(faculty, title="draft", status=NoticeStatus.DRAFT)
        await make_notice(faculty, title="archived", is_archived=True)
        return faculty

    return _build


# ── Viewer scoping ──────────────────────────────────────


class TestViewerScoping:
    @pytest.mark.asyncio
    async def test_student_sees_department_year_and_institution_wide(self, db_session, board, make_user):
        await board()
        student = await make_user("Asha", department="CSE", year="3rd Year")

        titles = await _visible_titles(db_session, student)

        assert titles == {"cse-3rd", "cse-any", "everyone"}

    @pytest.mark.asyncio
    async def test_student_without_year_is_not_year_filtered(self, db_session, board, make_user):
        await board()
        student = await make_user("Ravi", department="CSE", year=None)

        titles = await _visible_titles(db_session, student)

        assert titles == {"cse-3rd", "cse-2nd", "cse-any", "everyone"}

    @pytest.mark.asyncio
    async def test_empty_target_year_matches_every_year(self, db_session, make_user, make_notice):
        faculty = await make_user("Dr. Rao", role=UserRole.FACULTY)
        await make_notice(faculty, title="blank-year", target_year="")
        student = await make_user("Asha", year="1st Year")

        assert await _visible_titles(db_session, student) == {"blank-year"}

    @pytest.mark.asyncio
    async def test_faculty_sees_own_department_all_years(self, db_session, board, make_user):
        await board()
        faculty = await make_user("Dr. Iyer", role=UserRole.FACULTY, department="ECE")

        titles = await _visible_titles(db_session, faculty)

        assert titles == {"ece", "everyone"}

    @pytest.mark.asyncio
    async def test_admin_sees_every_published_notice(self, db_session, board, make_user):
        await board()
        admin = await make_user("Admin", role=UserRole.ADMIN, department=None)

        titles = await _visible_titles(db_session, admin)

        assert titles == {"cse-3rd", "cse-2nd", "cse-any", "ece", "everyone"}

    @pytest.mark.asyncio
    async def test_anonymous_sees_every_published_notice(self, db_session, board):
        await board()

        titles = await _visible_titles(db_session, None)

        assert titles == {"cse-3rd", "cse-2nd", "cse-any", "ece", "everyone"}


# ── Query filters ───────────────────────────────────────


class TestFilters:
    @pytest.mark.asyncio
    async def test_explicit_department_overrides_viewer_department(self, db_session, board, make_user):
        await board()
        student = await make_user("Asha", department="CSE")

        titles = await _visible_titles(db_session, student, department="ECE")

        assert titles == {"ece", "everyone"}

    @pytest.mark.asyncio
    async def test_department_all_means_no_department_filter(self, db_session, board):
        await board()

        titles = await _visible_titles(db_session, None, department="all")

        assert "ece" in titles and "cse-any" in titles

    @pytest.mark.asyncio
    async def test_category_filter(self, db_session, board):
        await board()

        assert await _visible_titles(db_session, None, category="events") == {"everyone"}
        assert len(await _visible_titles(db_session, None, category="all")) == 5

    @pytest.mark.asyncio
    async def test_unknown_category_matches_nothing(self, db_session, board):
        await board()

        assert await _visible_titles(db_session, None, category="sports") == set()

    @pytest.mark.asyncio
    async def test_status_filter_selects_drafts(self, db_session, board):
        await board()

        assert await _visible_titles(db_session, None, status="draft") == {"draft"}

    @pytest.mark.asyncio
    async def test_archived_notices_never_listed(self, db_session, board):
        await board()

        for status in (None, "published", "draft"):
            assert "archived" not in await _visible_titles(db_session, None, status=status)

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_over_title_and_content(self, db_session, make_user, make_notice):
        faculty = await make_user("Dr. Rao", role=UserRole.FACULTY)
        await make_notice(faculty, title="Hackathon", content="Register by Friday")
        await make_notice(faculty, title="Library hours", content="Open till 9 for the HACKATHON week")
        await make_notice(faculty, title="Fees", content="Due next month")

        titles = await _visible_titles(db_session, None, search="hackathon")

        assert titles == {"Hackathon", "Library hours"}

    @pytest.mark.asyncio
    async def test_search_matches_wildcard_characters_literally(self, db_session, make_user, make_notice):
        faculty = await make_user("Dr. Rao", role=UserRole.FACULTY)
        await make_notice(faculty, title="Fee hike 100%", content="From next term")
        await make_notice(faculty, title="Fees", content="Due next month")
        await make_notice(faculty, title="Holiday", content="Campus closed")
        await make_notice(faculty, title="Lab rules", content="See lab_rules.pdf for details")

        assert await _visible_titles(db_session, None, search="_") == {"Lab rules"}
        assert await _visible_titles(db_session, None, search="100%") == {"Fee hike 100%"}
        assert await _visible_titles(db_session, None, search="%") == {"Fee hike 100%"}
        assert await _visible_titles(db_session, None, search="\\") == set()

    @pytest.mark.asyncio
    async def test_search_and_year_both_narrow_a_student(self, db_session, make_user, make_notice):
        faculty = await make_user("Dr. Rao", role=UserRole.FACULTY)
        await make_notice(faculty, title="Hackathon finals", target_year="3rd Year")
        await make_notice(faculty, title="Hackathon open round", target_year=None)
        await make_notice(faculty, title="Hackathon juniors", target_year="2nd Year")
        await make_notice(faculty, title="Lab viva", target_year="3rd Year")
        student = await make_user("Asha", department="CSE", year="3rd Year")

        titles = await _visible_titles(db_session, student, search="hackathon")

        assert titles == {"Hackathon finals", "Hackathon open round"}

    @pytest.mark.asyncio
    async def test_blank_search_is_ignored(self, db_session, board):
        await board()

        assert len(await _visible_titles(db_session, None, search="   ")) == 5


# ── Single notice and ordering ──────────────────────────


class TestSingleNotice:
    @pytest.mark.asyncio
    async def test_admin_and_author_bypass_the_predicate(self, make_user, make_notice):
        author = await make_user("Dr. Rao", role=UserRole.FACULTY)
        admin = await make_user("Admin", role=UserRole.ADMIN)
        other = await make_user("Asha")
        notice = await make_notice(author, status=NoticeStatus.DRAFT)

        assert single_notice_predicate(admin, notice) is None
        assert single_notice_predicate(author, notice) is None
        assert single_notice_predicate(other, notice) is not None
        assert single_notice_predicate(None, notice) is not None


class TestOrdering:
    @pytest.mark.asyncio
    async def test_pinned_first_then_newest(self, db_session, make_user, make_notice):
        faculty = await make_user("Dr. Rao", role=UserRole.FACULTY)
        await make_notice(faculty, title="old-pinned", is_pinned=True)
        await make_notice(faculty, title="older")
        await make_notice(faculty, title="newest")

        result = await db_session.execute(
            select(Notice.title)
            .where(visible_notices_predicate(None))
            .order_by(*notice_ordering())
        )

        assert result.scalars().all() == ["old-pinned", "newest", "older"]
