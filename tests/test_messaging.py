import pytest

from staybite.errors import Forbidden, NotFound, ValidationFailed
from staybite.models import ListingKind
from staybite.services import messaging


def test_conversation_is_canonical_per_pair(db, make_user):
    a, b = make_user(), make_user()
    conv, created = messaging.get_or_create_conversation(db, b.id, a.id)
    assert created
    assert (conv.user_id_1, conv.user_id_2) == (min(a.id, b.id), max(a.id, b.id))

    again, created = messaging.get_or_create_conversation(db, a.id, b.id)
    assert again.id == conv.id
    assert not created


def test_listing_scoped_conversations_are_distinct(db, make_user, make_stay):
    guest, host = make_user(), make_user(is_host=True)
    stay = make_stay(host)
    general, _ = messaging.get_or_create_conversation(db, guest.id, host.id)
    about_stay, created = messaging.get_or_create_conversation(db, guest.id, host.id, stay.id, ListingKind.STAY, "Cabin question")
    assert created and about_stay.id != general.id
    assert about_stay.listing_type == "stay"


def test_same_numeric_id_of_other_kind_gets_its_own_thread(db, make_user, make_stay, make_food):
    guest, host = make_user(), make_user(is_host=True)
    stay, exp = make_stay(host), make_food(host)
    assert stay.id == exp.id
    stay_chat, _ = messaging.get_or_create_conversation(db, guest.id, host.id, stay.id, ListingKind.STAY, "stay chat")
    food_chat, created = messaging.get_or_create_conversation(
        db, guest.id, host.id, exp.id, ListingKind.FOOD_EXPERIENCE, "food chat"
    )
    assert created and food_chat.id != stay_chat.id
    assert (food_chat.listing_type, food_chat.title) == ("food_experience", "food chat")

    again, created = messaging.get_or_create_conversation(db, host.id, guest.id, exp.id, ListingKind.FOOD_EXPERIENCE)
    assert again.id == food_chat.id and not created


def test_cannot_message_yourself_or_nobody(db, make_user):
    user = make_user()
    with pytest.raises(ValidationFailed):
        messaging.get_or_create_conversation(db, user.id, user.id)
    with pytest.raises(NotFound):
        messaging.get_or_create_conversation(db, user.id, 4040)


def test_only_participants_can_send(db, make_user):
    a, b, outsider = make_user(), make_user(), make_user()
    conv, _ = messaging.get_or_create_conversation(db, a.id, b.id)
    with pytest.raises(Forbidden):
        messaging.send_message(db, outsider.id, conv.id, "hi")
    with pytest.raises(ValidationFailed):
        messaging.send_message(db, a.id, conv.id, "   ")


def test_send_bumps_last_message_time(db, make_user):
    a, b = make_user(), make_user()
    conv, _ = messaging.get_or_create_conversation(db, a.id, b.id)
    message = messaging.send_message(db, a.id, conv.id, "Is the cabin free in March?")
    db.refresh(conv)
    assert conv.last_message_at == message.created_at
    assert [c.id for c in messaging.list_conversations(db, b.id)] == [conv.id]


def test_messages_page_backwards(db, make_user):
    a, b = make_user(), make_user()
    conv, _ = messaging.get_or_create_conversation(db, a.id, b.id)
    sent = [messaging.send_message(db, a.id if n % 2 else b.id, conv.id, f"msg {n}") for n in range(25)]

    latest = messaging.list_messages(db, b.id, conv.id)
    assert [m.id for m in latest] == [m.id for m in sent[5:]]

    older = messaging.list_messages(db, b.id, conv.id, before_id=latest[0].id)
    assert [m.id for m in older] == [m.id for m in sent[:5]]
