"""
Database Package

Database models, connection management, and data persistence layer.
"""
from src.estatedesk.db.base import Base
from src.estatedesk.db.session import (
    engine,
    SessionLocal,
    get_db_session,
    health_check,
    create_all_tables,
    drop_all_tables,
)
from src.estatedesk.db.models import (
    User,
    Agent,
    Property,
    Lead,
    Deal,
    Task,
    CalendarEvent,
)
from src.estatedesk.db.repository import (
    BaseRepository,
    UserRepository,
    AgentRepository,
    PropertyRepository,
    DealRepository,
    LeadRepository,
    TaskRepository,
    CalendarEventRepository,
)

__all__ = [
    # Base
    "Base",
    # Session management
    "engine",
    "SessionLocal",
    "get_db_session",
    "health_check",
    "create_all_tables",
    "drop_all_tables",
    # Models
    "User",
    "Agent",
    "Property",
    "Lead",
    "Deal",
    "Task",
    "CalendarEvent",
    # Repositories
    "BaseRepository",
    "UserRepository",
    "AgentRepository",
    "PropertyRepository",
    "DealRepository",
    "LeadRepository",
    "TaskRepository",
    "CalendarEventRepository",
]
