from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class AdminStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    MOSQUE_DELETED = "mosque_deleted"
    ADMIN_REMOVED = "admin_removed"
    CODE_REGENERATED = "code_regenerated"


class MosqueAdminStatus(str, Enum):
    """Derived per-mosque status of the reconciled view."""

    APPROVED = "approved"
    NO_ADMIN = "no_admin"


class StatusFilter(str, Enum):
    ALL = "all"
    APPROVED = "approved"
    NO_ADMIN = "no_admin"


class AdminPresenceFilter(str, Enum):
    ALL = "all"
    HAS_ADMIN = "has_admin"
    NO_ADMIN = "no_admin"


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


class PriorityLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LoginOutcome(str, Enum):
    OK = "ok"
    PENDING = "pending"
    REJECTED = "rejected"
    REMOVED = "removed"
    MOSQUE_DELETED = "mosque_deleted"
    CODE_REGENERATED = "code_regenerated"
    INVALID_CREDENTIALS = "invalid_credentials"
    TIMEOUT = "timeout"
    ERROR = "error"
