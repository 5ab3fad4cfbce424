# tests/conftest.py
import pytest

from construction_dashboard.database.database import Base, make_engine, make_session_factory
from construction_dashboard.database.db_init import seed_demo_data

# bcrypt 최소 비용 계수. 테스트 속도를 위해 사용합니다.
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def engine():
    """테스트마다 새로운 SQLite 메모리 DB 엔진을 생성합니다."""
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)

@pytest.fixture
def db_session(session_factory):
    """비어 있는 DB에 연결된 세션."""
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def seeded_session(db_session):
    """데모 사용자와 샘플 프로젝트/작업이 들어 있는 세션."""
    seed_demo_data(db_session, bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    return db_session
