# clinic_queue/db/crud/user.py
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from clinic_queue.config.constants import Role
from clinic_queue.core.auth import PasswordHasher
from clinic_queue.core.exceptions import DuplicateEmail
from clinic_queue.db.models.user import UserModel
from clinic_queue.db.session import Database
from clinic_queue.schemas.shared import UserOut

logger = logging.getLogger(__name__)


class UserDirectory:
    """Staff accounts. Only ``get_by_email`` ever exposes a password hash."""

    def __init__(self, db: Database, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    async def create_user(
        self, name: str, email: str, password: str, role: Role = Role.user
    ) -> UserOut:
        """
        Hash the password and insert the user.

        Raises:
            DuplicateEmail: the email is already registered. Other storage
                errors propagate unchanged.
        """
        hashed = self.hasher.hash(password)
        user = UserModel(name=name, email=email, password_hash=hashed, role=Role(role).value)

        async with self.db.session() as session:
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.info(f"Signup rejected, email already registered: {email}")
                raise DuplicateEmail()
            await session.refresh(user)

        logger.info(f"Created user id={user.id} role={user.role}")
        return UserOut.model_validate(user)

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        """Full row including the password hash, for login only."""
        async with self.db.session() as session:
            result = await session.execute(select(UserModel).where(UserModel.email == email))
            return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> Optional[UserOut]:
        async with self.db.session() as session:
            user = await session.get(UserModel, user_id)
        if user is None:
            return None
        return UserOut.model_validate(user)

    async def authenticate(self, email: str, password: str) -> Optional[UserOut]:
        user = await self.get_by_email(email)
        if not user:
            return None
        if not self.hasher.verify(password, user.password_hash):
            return None
        return UserOut.model_validate(user)

    async def ensure_admin(self, name: str, email: str, password: str) -> UserOut:
        """Create the bootstrap admin account unless it already exists."""
        existing = await self.get_by_email(email)
        if existing:
            return UserOut.model_validate(existing)
        try:
            admin = await self.create_user(name, email, password, role=Role.admin)
        except DuplicateEmail:
            # another process created it between the lookup and the insert
            return UserOut.model_validate(await self.get_by_email(email))
        logger.info(f"Bootstrap admin created: {email}")
        return admin
