from meresahar.models.admin import AdminUser
from meresahar.models.issue import Issue, IssueStatus, IssueUrgency

__all__ = ["AdminUser", "Issue", "IssueStatus", "IssueUrgency"]
