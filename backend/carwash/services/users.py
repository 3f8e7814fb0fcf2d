# backend/carwash/services/users.py

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import begin_write
from ..models import Users
from .identity import IdentityProvider, ROLE_CUSTOMER

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, db: Session, identity: IdentityProvider):
        self.db = db
        self.identity = identity

    def get(self, user_id: str) -> Users | None:
        return self.db.get(Users, user_id)

    def get_or_create(self, user_id: str) -> Users:
        """
        Return the profile, materialising it from the identity provider on
        first use. Creation is a create-if-absent insert: if a concurrent
        request wins the race, its row is returned.
        """
        user = self.get(user_id)
        if user:
            return user

        details = self.identity.get_user(user_id)
        begin_write(self.db)
        try:
            with self.db.begin_nested():
                user = Users(
                    id=user_id,
                    name=details.name,
                    email=details.email,
                    role=details.role or ROLE_CUSTOMER,
                )
                self.db.add(user)
        except IntegrityError:
            logger.info(f"Profile {user_id} created concurrently, reusing it")
            user = self.db.query(Users).filter(Users.id == user_id).populate_existing().one()
        else:
            logger.info(f"Created profile for user_id={user_id}")

        self.db.commit()
        return user

    def upsert(self, user_id: str, name: str | None, email: str | None, role: str) -> Users:
        """Store/refresh a profile after signup or a role change."""
        begin_write(self.db)
        user = self.get(user_id)
        if user is None:
            user = Users(id=user_id)
            self.db.add(user)
        if name is not None:
            user.name = name
        if email is not None:
            user.email = email
        user.role = role
        self.db.commit()
        self.db.refresh(user)
        return user
