"""User accounts: registration, credential checks and profile updates."""

import logging
from datetime import datetime, timezone

from sqlalchemy.engine import Engine
from sqlmodel import select

from flowgenie.database import store_session
from flowgenie.errors import NotFoundError
from flowgenie.models.user import User
from flowgenie.services.auth import hash_password, verify_password
from flowgenie.utils.ids import generate_id

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, engine: Engine):
        self.engine = engine

    def _session(self):
        return store_session(self.engine)

    def get(self, user_id: str) -> User | None:
        with self._session() as session:
            return session.get(User, user_id)

    def find_by_email(self, email: str) -> User | None:
        with self._session() as session:
            return session.exec(select(User).where(User.email == email)).first()

    def create(self, email: str, password: str, flow_address: str | None = None) -> User:
        user = User(
            id=generate_id("user"),
            email=email,
            hashed_password=hash_password(password),
            flow_address=flow_address,
        )
        with self._session() as session:
            session.add(user)
            session.commit()
            session.refresh(user)
        logger.info(f"Registered user {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user if the password matches, else None."""
        user = self.find_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            return None
        return user

    def update(self, user_id: str, **fields) -> User:
        with self._session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError("User not found")
            for key, value in fields.items():
                setattr(user, key, value)
            user.updated_at = datetime.now(timezone.utc)
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    def set_password(self, user_id: str, new_password: str) -> User:
        return self.update(user_id, hashed_password=hash_password(new_password))
