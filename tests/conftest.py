import os
import pytest


@pytest.fixture(scope="session", autouse=True)
def set_test_env(tmp_path_factory):
    db_file = tmp_path_factory.mktemp("data") / "test.db"
    demo_file = tmp_path_factory.mktemp("demo") / "demo.db"
    os.environ["DB_PATH"] = str(db_file)
    os.environ["DEMO_DB_URL"] = str(demo_file)
    # AI calls must never leave the test run
    os.environ.pop("ANTHROPIC_API_KEY", None)
    from pantrix.db.database import init_db
    init_db()


@pytest.fixture
def state(tmp_path):
    from pantrix.core.state import AppState
    from pantrix.core.store import PersistentStore
    from pantrix.db.database import init_db
    db_file = tmp_path / "state.db"
    init_db(db_file)
    return AppState(PersistentStore(db_file))


@pytest.fixture
def hotel(state):
    state.login_hotel("The Grand Eatery", "New York, USA", "chef@grandeatery.example")
    return state


@pytest.fixture
def food_bank(state):
    state.login_food_bank("City Harvest", "New York, USA", "ops@cityharvest.example")
    return state


@pytest.fixture
def client(tmp_path, monkeypatch):
    """A TestClient over a fresh main DB for each test."""
    from fastapi.testclient import TestClient
    from app.main import app
    monkeypatch.setenv("DB_PATH", str(tmp_path / "api.db"))
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def fake_ai(monkeypatch):
    """Replace the Claude call with canned replies keyed by a prompt substring."""
    from pantrix.core import ai_assistant

    replies = {}
    prompts = []

    def _complete(content, max_tokens=2048):
        text = content if isinstance(content, str) else content[-1]["text"]
        prompts.append(text)
        for needle, reply in replies.items():
            if needle in text:
                if isinstance(reply, Exception):
                    raise reply
                return reply
        raise ai_assistant.RemoteCallError("no canned reply")

    monkeypatch.setattr(ai_assistant, "_complete", _complete)
    _complete.replies = replies
    _complete.prompts = prompts
    return _complete
