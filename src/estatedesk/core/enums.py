"""
Domain enumerations shared by models, schemas and the verification core.
"""
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    AGENT = "agent"
    PROPERTY_OWNER = "property_owner"
    CLIENT = "client"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class VerificationStatus(str, Enum):
    """Property-level verification state."""
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    FLAGGED = "flagged"


class DocumentDecision(str, Enum):
    """Decisions an admin may record against a single document."""
    VERIFIED = "verified"
    REJECTED = "rejected"
    FLAGGED = "flagged"


class MatchStatus(str, Enum):
    """Outcome of matching submitted title/survey details against the records."""
    VERIFIED = "verified"
    FLAGGED = "flagged"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"


class HistoryAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    VERIFICATION_STATUS_UPDATED = "VERIFICATION_STATUS_UPDATED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    DOCUMENT_VERIFIED = "DOCUMENT_VERIFIED"
    STAGE_UPDATED = "STAGE_UPDATED"
    ASSIGNMENT = "ASSIGNMENT"
    DOCUMENT_ADDED = "DOCUMENT_ADDED"
    COMMUNICATION = "COMMUNICATION"
    SYSTEM = "SYSTEM"


class DealStage(str, Enum):
    NEW = "new"
    CONTACT_MADE = "contact_made"
    VIEWING_SCHEDULED = "viewing_scheduled"
    NEGOTIATION = "negotiation"
    AGREEMENT = "agreement"
    DOCUMENTATION = "documentation"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class DealType(str, Enum):
    SALE = "sale"
    RENT = "rent"
    LEASE = "lease"


class LeadSource(str, Enum):
    WEBSITE = "website"
    REFERRAL = "referral"
    SOCIAL_MEDIA = "social_media"
    DIRECT = "direct"
    OTHER = "other"


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    WON = "won"
    LOST = "lost"


class CommunicationType(str, Enum):
    EMAIL = "email"
    CALL = "call"
    MEETING = "meeting"
    MESSAGE = "message"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EventType(str, Enum):
    MEETING = "meeting"
    VIEWING = "viewing"
    INSPECTION = "inspection"
    FOLLOW_UP = "follow_up"
    OTHER = "other"


class EventStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def enum_values(enum_cls) -> str:
    """Render enum values as a SQL IN list for check constraints."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
