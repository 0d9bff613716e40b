"""
SQLAlchemy ORM Models

Database models for the CRM back office. Documents and activity logs are
embedded JSON sequences owned by their parent row; they are never shared
between records or stored in separate tables.
"""
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    String, Integer, Numeric, Float, Date, DateTime, Text,
    ForeignKey, CheckConstraint, Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.estatedesk.core.enums import (
    AccountStatus,
    DealStage,
    DealType,
    EventStatus,
    EventType,
    LeadSource,
    LeadStatus,
    Priority,
    TaskStatus,
    UserRole,
    VerificationStatus,
    enum_values,
)
from src.estatedesk.db.base import Base, TimestampMixin, JSONType


class User(Base, TimestampMixin):
    """Authenticated account. The role drives the authorization gate."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        comment="Login identifier, stored lowercase"
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.CLIENT.value
    )
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    profile_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AccountStatus.ACTIVE.value
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(f"role IN ({enum_values(UserRole)})", name="check_user_role"),
        CheckConstraint(f"status IN ({enum_values(AccountStatus)})", name="check_user_status"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class Agent(Base, TimestampMixin):
    """Agent profile attached 1:1 to a user account."""
    __tablename__ = "agents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )
    license_number: Mapped[Optional[str]] = mapped_column(String(100), unique=True, nullable=True)
    specializations: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    areas_served: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    profile_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    performance_metrics: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AccountStatus.ACTIVE.value
    )

    user: Mapped["User"] = relationship("User")

    __table_args__ = (
        CheckConstraint(f"status IN ({enum_values(AccountStatus)})", name="check_agent_status"),
    )

    def __repr__(self) -> str:
        return f"<Agent(id={self.id}, user_id={self.user_id}, license={self.license_number})>"


class Property(Base, TimestampMixin):
    """
    Property listing with its verification state.

    verification_status is derived from the embedded documents after every
    document decision, or set directly by an admin override.
    """
    __tablename__ = "properties"
    __history_attr__ = "history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="User who listed the property"
    )
    owner_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    # Registry identifiers
    title_number: Mapped[Optional[str]] = mapped_column(
        String(100),
        unique=True,
        nullable=True,
        comment="Land title number"
    )
    survey_plan_number: Mapped[Optional[str]] = mapped_column(
        String(100),
        unique=True,
        nullable=True,
        comment="Survey plan number"
    )

    # Address and location
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 7, asdecimal=False),
        nullable=True,
        comment="Latitude"
    )
    longitude: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 7, asdecimal=False),
        nullable=True,
        comment="Longitude"
    )

    # Listing details
    property_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    size: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price: Mapped[Optional[float]] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    images: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    # Verification
    verification_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=VerificationStatus.PENDING.value
    )
    documents: Mapped[list] = mapped_column(
        JSONType,
        default=list,
        nullable=False,
        comment="Ordered embedded documents"
    )
    history: Mapped[list] = mapped_column(
        JSONType,
        default=list,
        nullable=False,
        comment="Append-only activity log"
    )

    deals: Mapped[list["Deal"]] = relationship(
        "Deal",
        back_populates="property",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "latitude >= -90 AND latitude <= 90",
            name="check_latitude_range"
        ),
        CheckConstraint(
            "longitude >= -180 AND longitude <= 180",
            name="check_longitude_range"
        ),
        CheckConstraint(
            f"verification_status IN ({enum_values(VerificationStatus)})",
            name="check_verification_status"
        ),
        Index("idx_properties_owner_id", "owner_id"),
        Index("idx_properties_verification_status", "verification_status"),
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, address={self.address}, status={self.verification_status})>"


class Lead(Base, TimestampMixin):
    """Prospective buyer or tenant tracked by an agent."""
    __tablename__ = "leads"
    __history_attr__ = "communication_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    source: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=LeadStatus.NEW.value
    )
    assigned_agent_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    property_interest: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    requirements: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    communication_history: Mapped[list] = mapped_column(
        JSONType,
        default=list,
        nullable=False,
        comment="Append-only activity log"
    )

    deals: Mapped[list["Deal"]] = relationship(
        "Deal",
        back_populates="lead",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(f"source IN ({enum_values(LeadSource)})", name="check_lead_source"),
        CheckConstraint(f"status IN ({enum_values(LeadStatus)})", name="check_lead_status"),
        Index("idx_leads_agent_status", "assigned_agent_id", "status"),
        Index("idx_leads_email", "email"),
    )

    def __repr__(self) -> str:
        return f"<Lead(id={self.id}, email={self.email}, status={self.status})>"


class Deal(Base, TimestampMixin):
    """Transaction in progress between a lead and a property."""
    __tablename__ = "deals"
    __history_attr__ = "activity_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False
    )
    lead_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("leads.id", ondelete="CASCADE"),
        nullable=False
    )
    agent_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False
    )
    stage: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default=DealStage.NEW.value
    )
    deal_type: Mapped[str] = mapped_column(String(10), nullable=False)
    value: Mapped[float] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=False)
    commission: Mapped[float] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=False)
    closing_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    documents: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    activity_log: Mapped[list] = mapped_column(
        JSONType,
        default=list,
        nullable=False,
        comment="Append-only activity log"
    )

    property: Mapped["Property"] = relationship("Property", back_populates="deals")
    lead: Mapped["Lead"] = relationship("Lead", back_populates="deals")

    __table_args__ = (
        CheckConstraint(f"stage IN ({enum_values(DealStage)})", name="check_deal_stage"),
        CheckConstraint(f"deal_type IN ({enum_values(DealType)})", name="check_deal_type"),
        CheckConstraint("value >= 0", name="check_deal_value_positive"),
        Index("idx_deals_agent_stage", "agent_id", "stage"),
        Index("idx_deals_property_id", "property_id"),
        Index("idx_deals_lead_id", "lead_id"),
    )

    def __repr__(self) -> str:
        return f"<Deal(id={self.id}, stage={self.stage}, value={self.value})>"


class Task(Base, TimestampMixin):
    """Work item handed from one user to another."""
    __tablename__ = "tasks"
    __history_attr__ = "history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=Priority.MEDIUM.value
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TaskStatus.PENDING.value
    )
    assigned_to_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    assigned_by_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    related_model: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="Property, Lead or Deal"
    )
    related_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    reminders: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    history: Mapped[list] = mapped_column(
        JSONType,
        default=list,
        nullable=False,
        comment="Append-only activity log"
    )

    __table_args__ = (
        CheckConstraint(f"priority IN ({enum_values(Priority)})", name="check_task_priority"),
        CheckConstraint(f"status IN ({enum_values(TaskStatus)})", name="check_task_status"),
        Index("idx_tasks_assignee_status", "assigned_to_id", "status"),
        Index("idx_tasks_due_date", "due_date"),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title}, status={self.status})>"


class CalendarEvent(Base, TimestampMixin):
    """Scheduled meeting, viewing or inspection."""
    __tablename__ = "calendar_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    event_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=EventType.OTHER.value
    )
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    attendees: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    related_model: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    related_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_by_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=EventStatus.SCHEDULED.value
    )

    __table_args__ = (
        CheckConstraint(f"event_type IN ({enum_values(EventType)})", name="check_event_type"),
        CheckConstraint(f"status IN ({enum_values(EventStatus)})", name="check_event_status"),
        CheckConstraint("end_time > start_time", name="check_event_time_order"),
        Index("idx_calendar_events_window", "start_time", "end_time"),
        Index("idx_calendar_events_created_by", "created_by_id"),
    )

    def __repr__(self) -> str:
        return f"<CalendarEvent(id={self.id}, title={self.title}, start={self.start_time})>"
