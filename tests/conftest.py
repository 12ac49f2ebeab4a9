import itertools
import os
import tempfile
from datetime import timedelta

# Point the app at throwaway storage before anything from staybite is imported
_TMP = tempfile.mkdtemp(prefix="staybite-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "media")
os.environ["BASE_URL"] = "http://testserver"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("CLOUDINARY_URL", None)
os.environ.pop("STORAGE_PUBLIC_URL", None)

import pytest
from fastapi.testclient import TestClient

from staybite.db import Base, SessionLocal, engine
from staybite.models import (
    FoodExperience,
    FoodExperienceAvailability,
    ListingStatus,
    Stay,
    StayAvailability,
    User,
)
from staybite.security import hash_password
from staybite.services import catalog, media

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xFF\xD8\xFF\xE0" + b"\x00" * 32

_password_hash = None


def _hashed(password="password123"):
    global _password_hash
    if _password_hash is None:
        _password_hash = hash_password(password)
    return _password_hash


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    catalog.invalidate_cache()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    return media.LocalBucket(root=str(tmp_path / "bucket"), public_url="http://testserver/media")


@pytest.fixture
def client():
    from staybite.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(name="Host", is_host=False, email=None):
        n = next(counter)
        user = User(email=email or f"user{n}@example.com", hashed_password=_hashed(), name=name, is_host=is_host)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_stay(db):
    def _make(host, **overrides):
        fields = dict(
            title="Lakeside cabin",
            description="Quiet cabin by the water",
            price_per_night=100.0,
            status=ListingStatus.PUBLISHED,
            property_type="cabin",
            bedrooms=2,
            beds=2,
            bathrooms=1,
            max_guests=4,
            location_name="Lake Tahoe",
            zipcode="96150",
        )
        fields.update(overrides)
        stay = Stay(host_id=host.id, **fields)
        db.add(stay)
        db.commit()
        db.refresh(stay)
        return stay

    return _make


@pytest.fixture
def make_food(db):
    def _make(host, **overrides):
        fields = dict(
            title="Pasta night",
            description="Hand-made pasta with the family",
            price_per_person=50.0,
            status=ListingStatus.PUBLISHED,
            cuisine_type="Italian",
            location_name="Trastevere",
            city="Rome",
            state="Lazio",
            zipcode="00153",
        )
        fields.update(overrides)
        exp = FoodExperience(host_id=host.id, **fields)
        db.add(exp)
        db.commit()
        db.refresh(exp)
        return exp

    return _make


@pytest.fixture
def add_stay_slots(db):
    def _add(stay, start, count, is_available=True, price_override=None):
        for offset in range(count):
            db.add(StayAvailability(
                stay_id=stay.id,
                date=start + timedelta(days=offset),
                is_available=is_available,
                price_override=price_override,
            ))
        db.commit()
        db.refresh(stay)

    return _add


@pytest.fixture
def add_food_slot(db):
    def _add(exp, day, spots, is_available=True, start_time=None, end_time=None):
        db.add(FoodExperienceAvailability(
            experience_id=exp.id,
            date=day,
            is_available=is_available,
            available_spots=spots,
            start_time=start_time,
            end_time=end_time,
        ))
        db.commit()
        db.refresh(exp)

    return _add
