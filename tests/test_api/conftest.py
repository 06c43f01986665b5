import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from proptrack.main import app
from proptrack.database import Base, get_db
from proptrack.models.user import User
from proptrack.services.user_service import hash_password

TEST_DB_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # Ensure all connections share same in-memory DB
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def client(engine):
    TestSession = sessionmaker(bind=engine, autoflush=False)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    db = TestSession()
    db.add(User(username="admin", email="admin@test.com", hashed_password=hash_password("admin123"), role="admin"))
    db.add(User(username="viewer", email="viewer@test.com", hashed_password=hash_password("viewer123"), role="user"))
    db.commit()
    db.close()

    with TestClient(app) as c:
        res = c.post("/api/auth/login", data={"username": "admin", "password": "admin123"})
        assert res.status_code == 200
        yield c

    app.dependency_overrides.clear()
