"""
Request-scoped application context.

Handlers receive an explicit AppContext instead of reaching for ambient
session state: it is initialised from the request credential when the
request starts and torn down on sign-out.
"""
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .db import get_db
from .errors import NotAuthenticated, backend_call
from .models import User
from .security import get_request_token, read_token
from .services.media import get_storage
from .services.session import AuthEventBus

# Process-wide auth event bus; listeners are registered at startup
auth_events = AuthEventBus()


@dataclass
class AppContext:
    db: Session
    events: AuthEventBus
    storage: Any = None
    token: Optional[str] = None
    user: Optional[User] = field(default=None)

    def init(self, token: Optional[str]) -> "AppContext":
        """Resolve the current session from a credential, if any."""
        self.token = token
        uid = read_token(token)
        if uid is not None:
            with backend_call(self.db, "load session"):
                self.user = self.db.get(User, uid)
        if self.user is None:
            self.token = None
        return self

    def teardown(self) -> None:
        self.user = None
        self.token = None

    @property
    def user_id(self) -> Optional[int]:
        return self.user.id if self.user else None


def get_context(request: Request, db: Session = Depends(get_db)) -> AppContext:
    ctx = AppContext(db=db, events=auth_events, storage=get_storage())
    return ctx.init(get_request_token(request))


def require_user(ctx: AppContext) -> User:
    """Refuse locally when there is no valid session."""
    if ctx.user is None:
        raise NotAuthenticated()
    return ctx.user
