import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from proptrack.database import Base
import proptrack.models  # noqa: F401
from proptrack.models.user import User
from proptrack.models.item import Item


TEST_DB_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db():
    engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(engine)


@pytest.fixture
def user(db):
    u = User(username="holder", email="holder@example.com", hashed_password="x", role="user")
    db.add(u)
    db.commit()
    return u


@pytest.fixture
def make_item(db):
    counter = iter(range(1, 1000))

    def _make(**kwargs):
        n = next(counter)
        kwargs.setdefault("code", f"ITM-{n:03d}")
        kwargs.setdefault("name", f"Item {n}")
        item = Item(**kwargs)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return _make
