import pytest

from staybite.context import AppContext
from staybite.errors import NotAuthenticated, ValidationFailed
from staybite.security import issue_token, read_token
from staybite.services.session import AuthEvent, AuthEventBus, AuthService


@pytest.fixture
def events():
    return AuthEventBus()


@pytest.fixture
def seen(events):
    received = []
    events.subscribe(lambda event, user: received.append((event, user.email if user else None)))
    return received


def test_unsubscribe_stops_delivery(events):
    received = []
    unsubscribe = events.subscribe(lambda event, user: received.append(event))
    events.publish(AuthEvent.SIGNED_OUT)
    unsubscribe()
    unsubscribe()
    events.publish(AuthEvent.SIGNED_OUT)
    assert received == [AuthEvent.SIGNED_OUT]


def test_broken_listener_does_not_block_others(events):
    received = []

    def broken(event, user):
        raise RuntimeError("boom")

    events.subscribe(broken)
    events.subscribe(lambda event, user: received.append(event))
    events.publish(AuthEvent.TOKEN_REFRESHED)
    assert received == [AuthEvent.TOKEN_REFRESHED]


def test_sign_up_and_sign_in(db, events, seen):
    auth = AuthService(db, events)
    user, token = auth.sign_up(" Maya@Example.com ", "password123", "Maya")
    assert user.email == "maya@example.com"
    assert read_token(token) == user.id

    with pytest.raises(ValidationFailed):
        auth.sign_up("maya@example.com", "password123", "Maya again")

    signed_in, _ = auth.sign_in("MAYA@example.com", "password123")
    assert signed_in.id == user.id
    with pytest.raises(NotAuthenticated):
        auth.sign_in("maya@example.com", "wrong-password")

    assert seen == [(AuthEvent.SIGNED_IN, "maya@example.com"), (AuthEvent.SIGNED_IN, "maya@example.com")]


def test_context_lifecycle(db, events, seen, make_user):
    user = make_user(name="Lee")
    ctx = AppContext(db=db, events=events).init(issue_token(user.id))
    assert ctx.user_id == user.id

    auth = AuthService(db, events)
    assert read_token(auth.refresh(ctx.user)) == user.id
    auth.update_metadata(ctx.user, name="Lee Park", is_host=True)
    assert ctx.user.name == "Lee Park" and ctx.user.is_host

    auth.sign_out(ctx)
    assert ctx.user is None and ctx.token is None
    assert [event for event, _ in seen] == [AuthEvent.TOKEN_REFRESHED, AuthEvent.USER_UPDATED, AuthEvent.SIGNED_OUT]


def test_invalid_token_means_signed_out(db, events):
    ctx = AppContext(db=db, events=events).init("not-a-token")
    assert ctx.user is None
    assert ctx.token is None
    with pytest.raises(NotAuthenticated):
        AuthService(db, events).refresh(ctx.user)
