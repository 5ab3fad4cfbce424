import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from construction_dashboard.config import DEFAULT_DATABASE_URL

# 모든 모델 클래스가 상속받을 Base 클래스
Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    """
    데이터베이스 URL로 SQLAlchemy 엔진을 생성합니다.
    SQLite 메모리 DB는 모든 세션이 하나의 연결을 공유해야 데이터가 유지되므로 StaticPool을 사용합니다.
    """
    if database_url.startswith("sqlite"):
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(
                database_url, connect_args={"check_same_thread": False}, poolclass=StaticPool
            )
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    # autocommit=False, autoflush=False: 리포지토리가 명시적으로 commit 합니다.
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


engine = make_engine(os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL))
SessionLocal = make_session_factory(engine)
