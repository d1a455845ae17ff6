"""
ORM models. Importing this package registers every table on `Base.metadata`
(Alembic and the test suite rely on that).
"""

from inkwell.models.article import Article, ArticleStatus
from inkwell.models.audit_log import AuditLog, RoleChangeLog
from inkwell.models.author_application import ApplicationStatus, AuthorApplication
from inkwell.models.reading_history import ReadingHistory
from inkwell.models.user_profile import Theme, UserProfile, UserRole

__all__ = [
    "Article",
    "ArticleStatus",
    "ApplicationStatus",
    "AuditLog",
    "AuthorApplication",
    "ReadingHistory",
    "RoleChangeLog",
    "Theme",
    "UserProfile",
    "UserRole",
]
