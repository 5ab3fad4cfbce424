# tests/services/test_dashboard_service.py
import pytest
from unittest.mock import MagicMock

from construction_dashboard.database import models
from construction_dashboard.database.db_init import DEMO_TENANT_ID
from construction_dashboard.repositories.interfaces import IProjectRepository, IWorkRepository
from construction_dashboard.repositories.sqlalchemy.sqlalchemy_project_repository import SqlalchemyProjectRepository
from construction_dashboard.repositories.sqlalchemy.sqlalchemy_work_repository import SqlalchemyWorkRepository
from construction_dashboard.services.dashboard_service import DashboardService

def test_summary_of_sample_data(seeded_session):
    """샘플 데이터 기준 KPI 집계를 검증합니다."""
    service = DashboardService(SqlalchemyProjectRepository(seeded_session), SqlalchemyWorkRepository(seeded_session))

    summary = service.summary(DEMO_TENANT_ID)

    assert summary["total_projects"] == 4
    assert summary["projects_by_status"] == {
        "PLANNING": 1, "IN_PROGRESS": 2, "ON_HOLD": 1, "COMPLETED": 0, "CANCELLED": 0
    }
    assert summary["total_works"] == 5
    assert summary["works_by_status"] == {
        "NOT_STARTED": 1, "IN_PROGRESS": 2, "ON_HOLD": 1, "COMPLETED": 1, "CANCELLED": 0
    }
    assert summary["active_works"] == 2
    assert summary["total_budget"] == 12000000
    assert summary["total_actual_cost"] == 3300000
    # (100 + 65 + 0 + 85 + 25) / 5
    assert summary["average_progress"] == 55.0
    # (95 + 88 + 92 + 78) / 4
    assert summary["average_quality_score"] == 88.2

def test_summary_is_scoped_to_tenant(seeded_session):
    service = DashboardService(SqlalchemyProjectRepository(seeded_session), SqlalchemyWorkRepository(seeded_session))

    summary = service.summary(tenant_id=999)

    assert summary["total_projects"] == 0
    assert summary["total_works"] == 0
    assert summary["average_progress"] == 0.0
    assert summary["average_quality_score"] is None

def test_summary_uses_display_progress():
    """완료된 작업은 저장된 진행률과 무관하게 100으로 집계됩니다."""
    project_repo = MagicMock(spec=IProjectRepository)
    work_repo = MagicMock(spec=IWorkRepository)
    project_repo.list_by_tenant.return_value = []
    work_repo.list_by_tenant.return_value = [
        models.Work(id=1, status="COMPLETED", progress=40),
        models.Work(id=2, status="CANCELLED", progress=60),
    ]

    summary = DashboardService(project_repo, work_repo).summary(tenant_id=1)

    assert summary["average_progress"] == 50.0
    project_repo.list_by_tenant.assert_called_once_with(1)
    work_repo.list_by_tenant.assert_called_once_with(1)
