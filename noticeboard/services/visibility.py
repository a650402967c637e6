"""
Which notices a viewer is allowed to see.

The predicate is composed here and executed by the caller, so the same
rules back the listing endpoint, the single-notice read and the tests.
"""

from typing import Optional

from sqlalchemy import ColumnElement, and_, false, or_, true

from noticeboard.models import ALL_DEPARTMENTS, Notice, NoticeCategory, NoticeStatus, User, UserRole

# Query-string value meaning "do not filter on this field"
ANY = "all"


def _enum_equals(column, enum_cls, value) -> ColumnElement[bool]:
    # Unknown values match nothing instead of failing at bind time
    try:
        member = enum_cls(value)
    except ValueError:
        return false()
    return column == member


def _department_clause(viewer: Optional[User], department: Optional[str]) -> Optional[ColumnElement[bool]]:
    # An explicit department parameter wins over the viewer's own department
    if department and department != ANY:
        return Notice.department.in_([department, ALL_DEPARTMENTS])
    if viewer is not None and viewer.role in (UserRole.STUDENT, UserRole.FACULTY):
        return Notice.department.in_([viewer.department, ALL_DEPARTMENTS])
    return None


def _year_clause(viewer: Optional[User]) -> Optional[ColumnElement[bool]]:
    if viewer is None or viewer.role != UserRole.STUDENT or not viewer.year:
        return None
    return or_(
        Notice.target_year.is_(None),
        Notice.target_year == "",
        Notice.target_year == viewer.year,
    )


def _search_clause(search: Optional[str]) -> Optional[ColumnElement[bool]]:
    if not search or not search.strip():
        return None
    # Wildcards typed by the user match literally
    term = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{term}%"
    return or_(
        Notice.title.ilike(pattern, escape="\\"),
        Notice.content.ilike(pattern, escape="\\"),
    )


def visible_notices_predicate(
    viewer: Optional[User] = None,
    *,
    category: Optional[str] = None,
    department: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> ColumnElement[bool]:
    """
    Build the WHERE clause selecting notices visible to ``viewer``.

    Args:
        viewer: Current user, or None for an anonymous read
        category: Exact category, or "all"/None for any
        department: Explicit department filter; overrides the viewer's own
        status: Exact status; defaults to published
        search: Case-insensitive substring of title or content

    Returns:
        A boolean clause usable in ``select(Notice).where(...)``
    """
    clauses: list[ColumnElement[bool]] = [Notice.is_archived.is_(False)]

    if category and category != ANY:
        clauses.append(_enum_equals(Notice.category, NoticeCategory, category))

    dept = _department_clause(viewer, department)
    if dept is not None:
        clauses.append(dept)

    clauses.append(_enum_equals(Notice.status, NoticeStatus, status or NoticeStatus.PUBLISHED))

    for group in (_search_clause(search), _year_clause(viewer)):
        if group is not None:
            clauses.append(group)

    return and_(true(), *clauses)


def single_notice_predicate(viewer: Optional[User], notice: Notice) -> Optional[ColumnElement[bool]]:
    """
    Extra WHERE clause for reading one notice by id.

    Admins and the notice's author see it unconditionally, drafts and
    archived notices included. Everyone else gets the listing predicate.
    """
    if viewer is not None and (viewer.role == UserRole.ADMIN or viewer.id == notice.author_id):
        return None
    return visible_notices_predicate(viewer)


def notice_ordering() -> tuple:
    """Pinned notices first, then newest first."""
    return (Notice.is_pinned.desc(), Notice.created_at.desc(), Notice.id.desc())
