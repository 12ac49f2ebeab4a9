"""
Sign-up/sign-in/sign-out and push-style auth-state notifications.

Subscribers register on an AuthEventBus and are told about every
sign-in, sign-out, token refresh and profile update, so nothing has to poll
for session changes.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import NotAuthenticated, ValidationFailed, backend_call
from ..models import User
from ..security import hash_password, issue_token, verify_password

logger = logging.getLogger(__name__)


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


Listener = Callable[[AuthEvent, Optional[User]], None]


class AuthEventBus:
    def __init__(self):
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: AuthEvent, user: Optional[User] = None) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, user)
            except Exception:
                # A broken listener must not block the others or the auth action
                logger.exception("Auth listener %r failed on %s", listener, event.value)


def log_auth_event(event: AuthEvent, user: Optional[User]) -> None:
    logger.info("Auth event %s for user %s", event.value, user.id if user else None)


class AuthService:
    def __init__(self, db: Session, events: AuthEventBus):
        self.db = db
        self.events = events

    def sign_up(self, email: str, password: str, name: str, is_host: bool = False) -> tuple[User, str]:
        email = email.strip().lower()
        with backend_call(self.db, "create account"):
            if self.db.scalar(select(User.id).where(User.email == email)) is not None:
                raise ValidationFailed("An account with this email already exists")
            user = User(email=email, hashed_password=hash_password(password), name=name.strip(), is_host=is_host)
            self.db.add(user)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise ValidationFailed("An account with this email already exists")
            self.db.refresh(user)
        token = issue_token(user.id)
        self.events.publish(AuthEvent.SIGNED_IN, user)
        return user, token

    def sign_in(self, email: str, password: str) -> tuple[User, str]:
        with backend_call(self.db, "sign in"):
            user = self.db.scalar(select(User).where(User.email == email.strip().lower()))
        if not user or not verify_password(password, user.hashed_password):
            raise NotAuthenticated("Invalid email or password")
        token = issue_token(user.id)
        self.events.publish(AuthEvent.SIGNED_IN, user)
        return user, token

    def refresh(self, user: Optional[User]) -> str:
        if user is None:
            raise NotAuthenticated()
        token = issue_token(user.id)
        self.events.publish(AuthEvent.TOKEN_REFRESHED, user)
        return token

    def sign_out(self, ctx) -> None:
        user = ctx.user
        ctx.teardown()
        self.events.publish(AuthEvent.SIGNED_OUT, user)

    def update_metadata(self, user: Optional[User], name: str | None = None, avatar_url: str | None = None, is_host: bool | None = None) -> User:
        if user is None:
            raise NotAuthenticated()
        with backend_call(self.db, "update profile"):
            if name is not None:
                user.name = name.strip()
            if avatar_url is not None:
                user.avatar_url = avatar_url.strip() or None
            if is_host is not None:
                user.is_host = is_host
            self.db.commit()
            self.db.refresh(user)
        self.events.publish(AuthEvent.USER_UPDATED, user)
        return user
