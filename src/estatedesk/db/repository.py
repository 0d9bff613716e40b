"""
Repository Pattern for Data Access

Provides CRUD operations and domain-specific queries for all models.
"""
from typing import List, Optional, Any, Type, TypeVar

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from src.estatedesk.db.models import (
    Agent,
    CalendarEvent,
    Deal,
    Lead,
    Property,
    Task,
    User,
)
from src.estatedesk.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


class BaseRepository:
    """
    Base repository with common CRUD operations.

    Generic repository that can be extended for specific models. Repositories
    only flush; the caller owns the transaction and commits once per request.
    """

    def __init__(self, model: Type[T]):
        """
        Initialize repository with model class.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model

    def get_by_id(self, session: Session, id_value: Any) -> Optional[T]:
        """
        Get single record by primary key.

        Args:
            session: Database session
            id_value: Primary key value

        Returns:
            Model instance or None
        """
        result = session.get(self.model, id_value)
        logger.debug(
            "repository_get_by_id",
            model=self.model.__name__,
            id=id_value,
            found=result is not None
        )
        return result

    def find(self, session: Session, order_by=None, **filters) -> List[T]:
        """
        Get records matching equality filters.

        Filters whose value is None are ignored, so optional query parameters
        can be passed straight through.

        Args:
            session: Database session
            order_by: Column expression(s) to sort by
            **filters: Column name to value

        Returns:
            List of model instances
        """
        query = select(self.model)
        for column, value in filters.items():
            if value is not None:
                query = query.where(getattr(self.model, column) == value)
        if order_by is not None:
            if isinstance(order_by, (list, tuple)):
                query = query.order_by(*order_by)
            else:
                query = query.order_by(order_by)

        result = session.execute(query).scalars().all()
        logger.debug(
            "repository_find",
            model=self.model.__name__,
            count=len(result),
            filters={k: v for k, v in filters.items() if v is not None}
        )
        return list(result)

    def create(self, session: Session, **kwargs) -> T:
        """
        Create new record.

        Args:
            session: Database session
            **kwargs: Model field values

        Returns:
            Created model instance
        """
        instance = self.model(**kwargs)
        session.add(instance)
        session.flush()
        logger.info("repository_created", model=self.model.__name__, id=getattr(instance, 'id', None))
        return instance

    def delete(self, session: Session, instance: T) -> None:
        """
        Delete record (hard delete), including its embedded sequences.

        Args:
            session: Database session
            instance: Model instance to remove
        """
        session.delete(instance)
        session.flush()
        logger.info("repository_deleted", model=self.model.__name__, id=getattr(instance, 'id', None))

    def count(self, session: Session) -> int:
        """
        Count total records.

        Args:
            session: Database session

        Returns:
            Total count
        """
        return session.scalar(select(func.count()).select_from(self.model))


class UserRepository(BaseRepository):
    """Repository for User accounts."""

    def __init__(self):
        super().__init__(User)

    def get_by_email(self, session: Session, email: str) -> Optional[User]:
        """
        Get user by login email (case-insensitive).

        Args:
            session: Database session
            email: Email address

        Returns:
            User instance or None
        """
        query = select(User).where(User.email == email.strip().lower())
        return session.execute(query).scalar_one_or_none()


class AgentRepository(BaseRepository):
    """Repository for Agent profiles."""

    def __init__(self):
        super().__init__(Agent)

    def get_by_user_id(self, session: Session, user_id: int) -> Optional[Agent]:
        query = select(Agent).where(Agent.user_id == user_id)
        return session.execute(query).scalar_one_or_none()


class PropertyRepository(BaseRepository):
    """Repository for Property model with registry lookups."""

    def __init__(self):
        super().__init__(Property)

    def find_by_identifier(
        self,
        session: Session,
        title_number: Optional[str] = None,
        survey_plan_number: Optional[str] = None,
    ) -> Optional[Property]:
        """
        Find a property by title number OR survey plan number.

        A match on either identifier qualifies. When the two identifiers point
        at different properties, the lowest id wins.

        Args:
            session: Database session
            title_number: Land title number
            survey_plan_number: Survey plan number

        Returns:
            Property instance or None
        """
        conditions = []
        if title_number:
            conditions.append(Property.title_number == title_number)
        if survey_plan_number:
            conditions.append(Property.survey_plan_number == survey_plan_number)
        if not conditions:
            return None

        query = select(Property).where(or_(*conditions)).order_by(Property.id).limit(1)
        result = session.execute(query).scalars().first()
        logger.debug(
            "property_identifier_lookup",
            title_number=title_number,
            survey_plan_number=survey_plan_number,
            found=result is not None
        )
        return result

    def identifier_taken(
        self,
        session: Session,
        title_number: Optional[str] = None,
        survey_plan_number: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """
        Check whether a title or survey plan number is already registered.

        Args:
            session: Database session
            title_number: Land title number
            survey_plan_number: Survey plan number
            exclude_id: Property to ignore (the one being updated)

        Returns:
            True if another property holds either identifier
        """
        conditions = []
        if title_number:
            conditions.append(Property.title_number == title_number)
        if survey_plan_number:
            conditions.append(Property.survey_plan_number == survey_plan_number)
        if not conditions:
            return False

        query = select(func.count()).select_from(Property).where(or_(*conditions))
        if exclude_id is not None:
            query = query.where(Property.id != exclude_id)
        return session.scalar(query) > 0


class DealRepository(BaseRepository):
    """Repository for Deal model."""

    def __init__(self):
        super().__init__(Deal)


class LeadRepository(BaseRepository):
    """Repository for Lead model."""

    def __init__(self):
        super().__init__(Lead)


class TaskRepository(BaseRepository):
    """Repository for Task model."""

    def __init__(self):
        super().__init__(Task)


class CalendarEventRepository(BaseRepository):
    """Repository for CalendarEvent model."""

    def __init__(self):
        super().__init__(CalendarEvent)

    def list_for_user(self, session: Session, user_id: Optional[int] = None, **filters) -> List[CalendarEvent]:
        """
        Events soonest first, optionally restricted to one creator.

        Args:
            session: Database session
            user_id: Creator user id (None for all events)
            **filters: Extra equality filters (status, event_type)

        Returns:
            List of events
        """
        return self.find(
            session,
            order_by=CalendarEvent.start_time.asc(),
            created_by_id=user_id,
            **filters,
        )
