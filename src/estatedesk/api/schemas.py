"""
Pydantic Schemas for API Request/Response Models

These schemas define the JSON structure for API endpoints. Every response is
wrapped in ``ApiResponse`` (``{success, data}``). Errors are rendered as
``{success: false, message, error}`` by the handlers in ``api.main``.
"""
from typing import Any, Dict, Generic, List, Optional, TypeVar
from datetime import datetime, date
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from src.estatedesk.core.enums import (
    CommunicationType,
    DealStage,
    DealType,
    DocumentDecision,
    EventStatus,
    EventType,
    LeadSource,
    LeadStatus,
    MatchStatus,
    Priority,
    TaskStatus,
    AccountStatus,
    UserRole,
    VerificationStatus,
)
from src.estatedesk.core.verification import normalize_identifier

T = TypeVar("T")


class RequestModel(BaseModel):
    """Base for request bodies; enums (defaults included) arrive as their plain string values."""
    model_config = ConfigDict(use_enum_values=True, validate_default=True)


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope."""
    success: bool = True
    data: T


class MessageResponse(BaseModel):
    """Success envelope without payload (deletes)."""
    success: bool = True
    message: str


# ---------------------------------------------------------------------------
# Embedded sequences
# ---------------------------------------------------------------------------

class HistoryEntry(BaseModel):
    """One append-only activity log entry."""
    action: str
    timestamp: datetime
    user_id: Optional[int] = None
    details: str
    changes: Optional[Dict[str, Any]] = None


class PropertyDocument(BaseModel):
    """Document embedded in a property."""
    type: str
    name: str
    url: str
    verification_status: str
    uploaded_by: Optional[int] = None
    uploaded_at: datetime
    verified_by: Optional[int] = None
    verified_at: Optional[datetime] = None
    verification_notes: Optional[str] = None


class DealDocument(BaseModel):
    """Document attached to a deal."""
    type: str
    url: str
    notes: Optional[str] = None
    uploaded_by: Optional[int] = None
    uploaded_at: datetime


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


# ---------------------------------------------------------------------------
# Users and agents
# ---------------------------------------------------------------------------

class UserRegister(RequestModel):
    """Self-service registration. Admin accounts cannot be self-registered."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None
    role: UserRole = UserRole.CLIENT

    @field_validator("role")
    @classmethod
    def role_not_admin(cls, value: UserRole) -> UserRole:
        if value == UserRole.ADMIN:
            raise ValueError("admin accounts cannot be self-registered")
        return value


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    role: str
    phone: Optional[str] = None
    status: str
    last_login: Optional[datetime] = None
    created_at: datetime


class Token(BaseModel):
    """Token response model."""
    access_token: str
    token_type: str


class AgentCreate(RequestModel):
    user_id: int
    license_number: str = Field(..., min_length=1)
    specializations: List[str] = Field(default_factory=list)
    areas_served: List[str] = Field(default_factory=list)
    bio: Optional[str] = None
    profile_image: Optional[str] = None


class AgentUpdate(RequestModel):
    license_number: Optional[str] = Field(None, min_length=1)
    specializations: Optional[List[str]] = None
    areas_served: Optional[List[str]] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = None


class PerformanceMetrics(RequestModel):
    deals_closed: Optional[int] = Field(None, ge=0)
    revenue_generated: Optional[float] = Field(None, ge=0)
    client_satisfaction: Optional[float] = Field(None, ge=0, le=5)
    response_time: Optional[float] = Field(None, ge=0, description="Average response time in hours")


class AgentStatusUpdate(RequestModel):
    status: AccountStatus


class AgentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    license_number: Optional[str] = None
    specializations: List[str]
    areas_served: List[str]
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    performance_metrics: Dict[str, Any]
    status: str
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

class PropertyBase(RequestModel):
    """Base property schema."""
    owner_name: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    title_number: Optional[str] = Field(None, max_length=100)
    survey_plan_number: Optional[str] = Field(None, max_length=100)
    address: str = Field(..., min_length=1, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    property_type: Optional[str] = None
    size: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)

    @field_validator("title_number", "survey_plan_number")
    @classmethod
    def canonical_identifier(cls, value: Optional[str]) -> Optional[str]:
        return normalize_identifier(value)


class PropertyCreate(PropertyBase):
    @model_validator(mode="after")
    def coordinates_paired(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be supplied together")
        return self


class PropertyUpdate(RequestModel):
    """Editable listing fields. Status, documents and history are not editable here."""
    owner_name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    title_number: Optional[str] = Field(None, max_length=100)
    survey_plan_number: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    property_type: Optional[str] = None
    size: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    images: Optional[List[str]] = None

    @field_validator("title_number", "survey_plan_number")
    @classmethod
    def canonical_identifier(cls, value: Optional[str]) -> Optional[str]:
        return normalize_identifier(value)


class PropertyDetail(BaseModel):
    """Detailed property schema with embedded documents and history."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    owner_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    title_number: Optional[str] = None
    survey_plan_number: Optional[str] = None
    address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    property_type: Optional[str] = None
    size: Optional[float] = None
    price: Optional[float] = None
    description: Optional[str] = None
    images: List[str]
    verification_status: VerificationStatus
    documents: List[PropertyDocument]
    history: List[HistoryEntry]
    created_at: datetime
    updated_at: datetime


class DocumentUpload(RequestModel):
    document_type: str = Field(..., min_length=1)
    document_name: str = Field(..., min_length=1)
    document_url: str = Field(..., min_length=1)


class DocumentVerificationRequest(RequestModel):
    document_index: int
    verification_status: DocumentDecision
    notes: Optional[str] = None


class VerificationOverride(RequestModel):
    status: VerificationStatus
    notes: Optional[str] = None


class VerifyDetailsRequest(RequestModel):
    title_number: Optional[str] = None
    survey_plan_number: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class VerificationOutcome(BaseModel):
    status: MatchStatus
    message: str
    distance: Optional[int] = None


class VerifyDetailsResult(BaseModel):
    property: PropertyDetail
    verification: VerificationOutcome


# ---------------------------------------------------------------------------
# Leads
# ---------------------------------------------------------------------------

class PropertyInterest(RequestModel):
    property_id: int
    interest_level: Optional[Priority] = None
    notes: Optional[str] = None


class LeadRequirements(RequestModel):
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    property_type: List[str] = Field(default_factory=list)
    preferred_locations: List[str] = Field(default_factory=list)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    other_preferences: Dict[str, Any] = Field(default_factory=dict)


class LeadCreate(RequestModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = None
    source: LeadSource
    status: LeadStatus = LeadStatus.NEW
    property_interest: List[PropertyInterest] = Field(default_factory=list)
    requirements: LeadRequirements = Field(default_factory=LeadRequirements)
    notes: Optional[str] = None


class LeadUpdate(RequestModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    source: Optional[LeadSource] = None
    status: Optional[LeadStatus] = None
    property_interest: Optional[List[PropertyInterest]] = None
    requirements: Optional[LeadRequirements] = None
    notes: Optional[str] = None


class CommunicationCreate(RequestModel):
    type: CommunicationType
    message: str = Field(..., min_length=1)
    outcome: Optional[str] = None


class LeadAssignment(RequestModel):
    agent_id: int


class LeadDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    source: LeadSource
    status: LeadStatus
    assigned_agent_id: Optional[int] = None
    property_interest: List[Dict[str, Any]]
    requirements: Dict[str, Any]
    notes: Optional[str] = None
    communication_history: List[HistoryEntry]
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Deals
# ---------------------------------------------------------------------------

class DealCreate(RequestModel):
    property_id: int
    lead_id: int
    deal_type: DealType
    value: float = Field(..., ge=0)
    commission: float = Field(..., ge=0)
    stage: DealStage = DealStage.NEW
    closing_date: Optional[date] = None
    notes: Optional[str] = None


class DealUpdate(RequestModel):
    deal_type: Optional[DealType] = None
    value: Optional[float] = Field(None, ge=0)
    commission: Optional[float] = Field(None, ge=0)
    closing_date: Optional[date] = None
    notes: Optional[str] = None


class DealStageUpdate(RequestModel):
    stage: DealStage


class DealDocumentCreate(RequestModel):
    document_url: str = Field(..., min_length=1)
    document_type: str = Field(..., min_length=1)
    notes: Optional[str] = None


class DealDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    property_id: int
    lead_id: int
    agent_id: int
    stage: DealStage
    deal_type: DealType
    value: float
    commission: float
    closing_date: Optional[date] = None
    notes: Optional[str] = None
    documents: List[DealDocument]
    activity_log: List[HistoryEntry]
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

class RelatedRecord(RequestModel):
    model: str = Field(..., pattern="^(Property|Lead|Deal)$")
    id: int


class TaskCreate(RequestModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Priority
    status: TaskStatus = TaskStatus.PENDING
    assigned_to_id: int
    related_to: Optional[RelatedRecord] = None


class TaskUpdate(RequestModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    assigned_to_id: Optional[int] = None


class TaskStatusUpdate(RequestModel):
    status: TaskStatus


class TaskDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Priority
    status: TaskStatus
    assigned_to_id: int
    assigned_by_id: int
    related_model: Optional[str] = None
    related_id: Optional[int] = None
    history: List[HistoryEntry]
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------

class Attendee(RequestModel):
    user_id: int
    status: str = Field("pending", pattern="^(pending|accepted|declined)$")


class CalendarEventBase(RequestModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    event_type: EventType
    location: Optional[str] = None
    attendees: List[Attendee] = Field(default_factory=list)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class CalendarEventCreate(CalendarEventBase):
    related_model: Optional[str] = Field(None, pattern="^(Property|Lead|Deal|Task)$")
    related_id: Optional[int] = None


class CalendarEventStatusUpdate(RequestModel):
    status: EventStatus


class CalendarEventDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    event_type: EventType
    location: Optional[str] = None
    attendees: List[Dict[str, Any]]
    related_model: Optional[str] = None
    related_id: Optional[int] = None
    created_by_id: int
    status: EventStatus
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------

class HealthCheck(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    database: str = "connected"
    timestamp: datetime
