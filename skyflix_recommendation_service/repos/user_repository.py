"""Repository for reading users and their preferences."""

from typing import List, Optional

from sqlalchemy.orm import Session

from skyflix_recommendation_service.models import User, UserPreference


class UserRepository:
    """
    Repository for reading users.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> Optional[User]:
        """Get a user by ID."""
        return self.db.query(User).filter(User.user_id == user_id).first()

    # noinspection PyTypeChecker
    def get_preferences(self, user_id: int) -> List[UserPreference]:
        """Get a user's taste signals."""
        return (
            self.db.query(UserPreference)
            .filter(UserPreference.user_id == user_id)
            .order_by(UserPreference.preference_id)
            .all()
        )
