import logging
from datetime import date

from sqlalchemy.orm import Session

from .database import engine, SessionLocal, Base, make_engine, make_session_factory
from .models import User, Project, Work, ProjectStatus, WorkStatus
from construction_dashboard.utils.passwords import hash_password

logger = logging.getLogger(__name__)

DEMO_TENANT_ID = 1
DEMO_EMAIL = "admin@construcao.com"
DEMO_PASSWORD = "admin123"

SAMPLE_PROJECTS = [
    dict(name="Residencial Jardim das Flores", description="Construção de condomínio residencial com 120 unidades",
         status=ProjectStatus.IN_PROGRESS, start_date=date(2024, 1, 15), end_date=date(2024, 12, 30),
         budget=2500000, actual_cost=1200000, progress=48, manager="João Silva"),
    dict(name="Centro Comercial Plaza", description="Construção de centro comercial com 50 lojas",
         status=ProjectStatus.PLANNING, start_date=date(2024, 3, 1), end_date=date(2025, 2, 28),
         budget=4200000, actual_cost=0, progress=5, manager="Maria Santos"),
    dict(name="Galpão Industrial Norte", description="Construção de galpão industrial de 5000m²",
         status=ProjectStatus.IN_PROGRESS, start_date=date(2023, 10, 1), end_date=date(2024, 6, 30),
         budget=1800000, actual_cost=1650000, progress=92, manager="Carlos Oliveira"),
    dict(name="Reforma Hospital Central", description="Reforma e ampliação do hospital central",
         status=ProjectStatus.ON_HOLD, start_date=date(2024, 2, 1), end_date=None,
         budget=3500000, actual_cost=450000, progress=12, manager="Ana Costa"),
]

# project 값은 SAMPLE_PROJECTS의 인덱스입니다.
SAMPLE_WORKS = [
    dict(project=0, name="Fundação Bloco A", description="Execução da fundação do bloco residencial A",
         location="Jardim das Flores - Quadra 1", status=WorkStatus.COMPLETED, progress=100,
         planned_cost=180000, actual_cost=175000, start_date=date(2024, 1, 15), end_date=date(2024, 2, 28),
         assignee="Equipe Alpha", quality_score=95, last_update=date(2024, 2, 28)),
    dict(project=0, name="Estrutura Bloco B", description="Construção da estrutura de concreto armado",
         location="Jardim das Flores - Quadra 2", status=WorkStatus.IN_PROGRESS, progress=65,
         planned_cost=320000, actual_cost=210000, start_date=date(2024, 2, 1), end_date=date(2024, 5, 30),
         assignee="Equipe Beta", quality_score=88, last_update=date(2024, 3, 15)),
    dict(project=1, name="Instalações Elétricas", description="Instalação do sistema elétrico completo",
         location="Centro Comercial Plaza", status=WorkStatus.NOT_STARTED, progress=0,
         planned_cost=450000, actual_cost=0, start_date=date(2024, 4, 1), end_date=date(2024, 7, 15),
         assignee="Equipe Gamma", quality_score=None, last_update=date(2024, 3, 1)),
    dict(project=2, name="Cobertura Industrial", description="Instalação da cobertura metálica do galpão",
         location="Galpão Industrial Norte", status=WorkStatus.IN_PROGRESS, progress=85,
         planned_cost=280000, actual_cost=265000, start_date=date(2024, 1, 10), end_date=date(2024, 4, 30),
         assignee="Equipe Delta", quality_score=92, last_update=date(2024, 3, 20)),
    dict(project=3, name="Reforma Ala Norte", description="Reforma completa da ala norte do hospital",
         location="Hospital Central", status=WorkStatus.ON_HOLD, progress=25,
         planned_cost=680000, actual_cost=170000, start_date=date(2024, 2, 1), end_date=None,
         assignee="Equipe Epsilon", quality_score=78, last_update=date(2024, 3, 10)),
]


def seed_demo_data(db: Session, bcrypt_rounds: int = 12) -> bool:
    """
    데모 사용자와 샘플 프로젝트/작업을 삽입합니다.

    Returns:
        데이터를 삽입했으면 True, 이미 사용자가 있어 건너뛰었으면 False.
    """
    if db.query(User).first():
        logger.info("Demo data already present; skipping seed.")
        return False

    db.add(User(
        email=DEMO_EMAIL,
        password_hash=hash_password(DEMO_PASSWORD, rounds=bcrypt_rounds),
        display_name="Administrador",
        tenant_id=DEMO_TENANT_ID,
    ))

    projects = []
    for row in SAMPLE_PROJECTS:
        project = Project(tenant_id=DEMO_TENANT_ID, **dict(row, status=row["status"].value))
        db.add(project)
        projects.append(project)
    # 작업이 참조할 프로젝트 ID를 할당받기 위해 먼저 flush 합니다.
    db.flush()

    for row in SAMPLE_WORKS:
        row = dict(row, status=row["status"].value)
        project = projects[row.pop("project")]
        db.add(Work(tenant_id=DEMO_TENANT_ID, project_id=project.id, **row))

    db.commit()
    logger.info("Seeded demo tenant %s with %d projects and %d works.",
                DEMO_TENANT_ID, len(SAMPLE_PROJECTS), len(SAMPLE_WORKS))
    return True


def initialize_db(database_url: str = None, bcrypt_rounds: int = 12, bind=None, session_factory=None):
    """
    테이블을 생성하고, 비어 있는 DB에 데모 데이터를 삽입합니다.

    Args:
        database_url: 초기화할 DB URL. bind와 session_factory가 없을 때 이 URL로 엔진을 만듭니다.
        bcrypt_rounds: 데모 사용자 비밀번호 해시의 비용 계수.
        bind: 테이블을 생성할 엔진. 생략하면 database_url 또는 기본 엔진을 사용합니다.
        session_factory: 데이터를 삽입할 세션 팩토리. 생략하면 bind에 연결된 팩토리를 만듭니다.
    """
    if bind is None:
        bind = make_engine(database_url) if database_url else engine
    if session_factory is None:
        session_factory = SessionLocal if bind is engine else make_session_factory(bind)

    Base.metadata.create_all(bind=bind)
    db = session_factory()
    try:
        seed_demo_data(db, bcrypt_rounds=bcrypt_rounds)
    except Exception:
        db.rollback()
        logger.exception("Failed to seed demo data.")
        raise
    finally:
        db.close()


if __name__ == '__main__':
    from construction_dashboard.config import load_settings
    from construction_dashboard.logging_config import configure_logging

    settings = load_settings()
    configure_logging(settings.log_level, settings.log_format)
    initialize_db(settings.database_url, bcrypt_rounds=settings.bcrypt_rounds)
