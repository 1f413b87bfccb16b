import os
import tempfile

# Keep the default database out of the working tree
os.environ.setdefault("DB_DIR", tempfile.mkdtemp(prefix="learncheck_test_"))

import pytest
from sqlalchemy.orm import sessionmaker

from fakes import FakeGateway
from learncheck.database import init_db, make_engine
from learncheck.services.quiz_controller import PacingDelays, QuizController
from learncheck.services.session_store import SessionStore


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'sessions.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> SessionStore:
    return SessionStore(sessionmaker(bind=engine, autoflush=False))


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def controller(gateway: FakeGateway, store: SessionStore) -> QuizController:
    return QuizController(gateway, store, pacing=PacingDelays.none())
