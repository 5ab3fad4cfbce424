from typing import Any, Dict, List

from construction_dashboard.database.models import ProjectStatus, WorkStatus
from construction_dashboard.repositories.interfaces import IProjectRepository, IWorkRepository
from construction_dashboard.utils.color_bands import display_progress


def _count_by_status(entities: List[Any], statuses) -> Dict[str, int]:
    counts = {s.value: 0 for s in statuses}
    for entity in entities:
        counts[entity.status] = counts.get(entity.status, 0) + 1
    return counts


class DashboardService:
    """메인 화면의 KPI 카드에 표시할 집계값을 테넌트 단위로 계산합니다."""

    def __init__(self, project_repo: IProjectRepository, work_repo: IWorkRepository):
        self.project_repo = project_repo
        self.work_repo = work_repo

    def summary(self, tenant_id: int) -> Dict[str, Any]:
        """
        프로젝트와 작업 현황을 집계합니다.

        Returns:
            상태별 개수, 진행 중인 작업 수, 예산/실제 비용 합계, 평균 진행률,
            평균 품질 점수(점수가 있는 작업만, 없으면 None)를 담은 딕셔너리.
        """
        projects = self.project_repo.list_by_tenant(tenant_id)
        works = self.work_repo.list_by_tenant(tenant_id)

        scores = [w.quality_score for w in works if w.quality_score is not None]
        progresses = [display_progress(w.progress, w.status) for w in works]

        return {
            "total_projects": len(projects),
            "projects_by_status": _count_by_status(projects, ProjectStatus),
            "total_works": len(works),
            "works_by_status": _count_by_status(works, WorkStatus),
            "active_works": sum(1 for w in works if w.status == WorkStatus.IN_PROGRESS.value),
            "total_budget": sum(p.budget or 0 for p in projects),
            "total_actual_cost": sum(p.actual_cost or 0 for p in projects),
            "average_progress": round(sum(progresses) / len(progresses), 1) if progresses else 0.0,
            "average_quality_score": round(sum(scores) / len(scores), 1) if scores else None,
        }
