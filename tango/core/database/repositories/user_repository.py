"""
User repository for database operations
"""

import logging

from ..connection import DatabaseConnection
from ..models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user-related database operations"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def create_user(self, username: str) -> User | None:
        """Create a new user"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    "INSERT INTO users (username) VALUES (?)",
                    (username.strip(),),
                )
                user_id = cursor.lastrowid
                conn.commit()

                logger.info(f"Created user {user_id} ({username})")
                return self.get_user_by_id(user_id)
        except Exception as e:
            logger.error(f"Error creating user: {e}")
            return None

    def get_user_by_id(self, user_id: int) -> User | None:
        """Get user by ID"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
                row = cursor.fetchone()
                return dict(row) if row else None
        except Exception as e:
            logger.error(f"Error getting user by ID: {e}")
            return None
