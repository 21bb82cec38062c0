import itertools
import os
from typing import Any, Callable, Dict, Generator, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Настройки читаются при импорте teamtasks.core.settings, поэтому окружение задаём первым делом
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "testsecretkey"

# Все модели регистрируются в Base.metadata через teamtasks/models/__init__.py
import teamtasks.models
from teamtasks.models.base import Base

from teamtasks.main import app
from teamtasks.dependencies import get_db, get_event_publisher
from teamtasks.crud.user import create_user
from teamtasks.core import security
from teamtasks.realtime.events import RealtimeEvent

engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


class RecordingPublisher:
    """
    Подменяет ConnectionHub в тестах: запоминает всё, что сервисы публикуют.
    """

    def __init__(self) -> None:
        self.direct: List[tuple] = []
        self.broadcasts: List[RealtimeEvent] = []

    def publish_to_user(self, user_id: int, event: RealtimeEvent) -> None:
        self.direct.append((user_id, event))

    def broadcast(self, event: RealtimeEvent) -> None:
        self.broadcasts.append(event)

    def sent_to(self, user_id: int) -> List[str]:
        return [event.event for uid, event in self.direct if uid == user_id]

    def broadcast_names(self) -> List[str]:
        return [event.event for event in self.broadcasts]


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Чистая схема на каждый тест.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """
    TestClient с подменённой сессией БД. Публикация событий идёт в настоящий ConnectionHub.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture(scope="function")
def publisher() -> Generator[RecordingPublisher, None, None]:
    recorder = RecordingPublisher()
    app.dependency_overrides[get_event_publisher] = lambda: recorder
    yield recorder
    app.dependency_overrides.pop(get_event_publisher, None)


@pytest.fixture(scope="function")
def make_user(db: Session) -> Callable[..., Any]:
    counter = itertools.count(1)

    def _make(name: str = None, email: str = None, password: str = "password123"):
        n = next(counter)
        return create_user(db, {
            "email": email or f"user{n}@example.com",
            "name": name or f"User {n}",
            "password": password,
        })

    return _make


@pytest.fixture(scope="function")
def test_user(make_user) -> Any:
    return make_user(name="Alice", email="alice@example.com")


@pytest.fixture(scope="function")
def other_user(make_user) -> Any:
    return make_user(name="Bob", email="bob@example.com")


@pytest.fixture(scope="function")
def third_user(make_user) -> Any:
    return make_user(name="Carol", email="carol@example.com")


@pytest.fixture(scope="function")
def auth_headers() -> Callable[[Any], Dict[str, str]]:
    """
    Заголовок Authorization для любого пользователя.
    """
    def _headers(user: Any) -> Dict[str, str]:
        token, _ = security.create_access_token(user.id, user.email)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture(scope="function")
def normal_user_token_headers(test_user: Any, auth_headers) -> Dict[str, str]:
    return auth_headers(test_user)
