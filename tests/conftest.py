import os
import threading
from types import SimpleNamespace

# Keep tests away from the real database, preferences file and API keys
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["PREFERENCES_FILE"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["CHAT_PROVIDER"] = "openai"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from daybook.auth import hash_api_key
from daybook.config import settings
from daybook.database import Base, get_db
from daybook.journal.fixtures import seed_state
from daybook.journal.store import JournalStore
from daybook.main import app
from daybook.models import Profile
from daybook.routers.journal import get_store
from daybook.services import llm

TEST_API_KEY = "test-api-key"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory(db):
    """Fresh sessions on the test engine, for code that opens its own."""
    return TestingSessionLocal


@pytest.fixture(scope="function")
def store():
    return JournalStore(seed_state())


@pytest.fixture(scope="function")
def client(db, store):
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_store] = lambda: store

    with TestClient(app) as c:
        yield c

    app.dependency_overrides = {}


@pytest.fixture(scope="function")
def profile(db):
    profile = Profile(
        first_name="Sam",
        last_name="Johnson",
        api_key_hash=hash_api_key(TEST_API_KEY),
        is_super_admin=True,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture(scope="function")
def authorized_client(client, profile):
    client.headers.update({"X-API-Key": TEST_API_KEY})
    return client


# ============================================================
# Fake OpenAI client
# ============================================================

class FakeOpenAI:
    """Stands in for openai.OpenAI; records calls on a shared `recorder`."""

    def __init__(self, recorder, api_key=None):
        self.recorder = recorder
        self.api_key = api_key
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._chat))
        self.audio = SimpleNamespace(transcriptions=SimpleNamespace(create=self._transcribe))
        self.models = SimpleNamespace(list=self._list_models)

    def _chat(self, **kwargs):
        self.recorder.chat_calls.append(kwargs)
        if self.recorder.error:
            raise self.recorder.error
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(role="assistant", content=self.recorder.reply))],
            usage=SimpleNamespace(prompt_tokens=12, completion_tokens=8, total_tokens=20),
        )

    def _transcribe(self, model, file):
        self.recorder.transcriptions.append({
            "model": model,
            "name": file.name,
            "bytes": file.read(),
            "thread": threading.get_ident(),
        })
        if self.recorder.error:
            raise self.recorder.error
        return SimpleNamespace(text=f"  {self.recorder.transcript}  ")

    def _list_models(self):
        if self.api_key != self.recorder.valid_key:
            import openai
            raise openai.OpenAIError("Incorrect API key provided")
        return []


@pytest.fixture(scope="function")
def fake_openai(monkeypatch):
    recorder = SimpleNamespace(
        chat_calls=[],
        transcriptions=[],
        reply="Let's look at what gave you energy today.",
        transcript="I went for a run this morning",
        valid_key="sk-valid",
        error=None,
    )
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    monkeypatch.setattr(settings, "chat_provider", "openai")
    monkeypatch.setattr(llm, "OpenAI", lambda api_key=None: FakeOpenAI(recorder, api_key))
    return recorder


# ============================================================
# Fake Anthropic client
# ============================================================

class FakeAnthropic:
    """Stands in for anthropic.Anthropic; records messages.create calls."""

    def __init__(self, recorder, api_key=None):
        self.recorder = recorder
        self.api_key = api_key
        self.messages = SimpleNamespace(create=self._create)

    def _create(self, **kwargs):
        self.recorder.calls.append(kwargs)
        if self.recorder.error:
            raise self.recorder.error
        return SimpleNamespace(
            content=[SimpleNamespace(type="text", text=f"\n{self.recorder.reply}\n")],
            usage=SimpleNamespace(input_tokens=30, output_tokens=12),
        )


@pytest.fixture(scope="function")
def fake_anthropic(monkeypatch):
    recorder = SimpleNamespace(
        calls=[],
        reply="What would a small win look like this week?",
        error=None,
    )
    monkeypatch.setattr(settings, "anthropic_api_key", "sk-ant-test")
    monkeypatch.setattr(settings, "chat_provider", "anthropic")
    monkeypatch.setattr(llm, "Anthropic", lambda api_key=None: FakeAnthropic(recorder, api_key))
    return recorder
