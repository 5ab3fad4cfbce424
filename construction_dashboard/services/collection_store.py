import logging
import math
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from construction_dashboard.database import models
from construction_dashboard.database.models import ProjectStatus, WorkStatus
from construction_dashboard.repositories.interfaces import IProjectRepository, IWorkRepository
from construction_dashboard.services.exceptions import ValidationError, PersistenceError

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"
# DB 정수 컬럼(64비트)에 담을 수 있는 최대 ID
MAX_ENTITY_ID = 2 ** 63 - 1


def _text(draft: Mapping[str, Any], field: str) -> str:
    value = draft.get(field)
    if value is None:
        return ""
    return str(value).strip()


def _date(draft: Mapping[str, Any], field: str, errors: Dict[str, str], required: bool = False) -> Optional[date]:
    raw = draft.get(field)
    if isinstance(raw, date):
        return raw
    raw = "" if raw is None else str(raw).strip()
    if not raw:
        if required:
            errors[field] = "This field is required."
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        errors[field] = "Enter a valid date (YYYY-MM-DD)."
        return None


def _amount(draft: Mapping[str, Any], field: str, errors: Dict[str, str]) -> Optional[float]:
    raw = draft.get(field)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, bool):
        errors[field] = "Enter a valid number."
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        errors[field] = "Enter a valid number."
        return None
    if not math.isfinite(value):
        errors[field] = "Enter a valid number."
        return None
    if value < 0:
        errors[field] = "Must not be negative."
        return None
    return value


def _check_date_range(start: Optional[date], end: Optional[date], errors: Dict[str, str]):
    if start and end and end < start:
        errors["end_date"] = "End date must not be before the start date."


class EntityCollectionStore:
    """
    화면(view) 하나가 소유하는 엔티티 컬렉션입니다.
    ID 순서(삽입 순서)를 유지하며, 조회는 컬렉션을 변경하지 않고 새 리스트를 반환합니다.
    엔티티 종류별 규칙(검색 필드, 필수 필드, 초기 상태)은 하위 클래스가 정의합니다.
    """
    kind = ""
    status_enum = None
    required_fields: Tuple[str, ...] = ()

    def __init__(self, repository, tenant_id: int, entities: Optional[Iterable[Any]] = None):
        """
        Args:
            repository: 엔티티를 불러오고 저장하는 리포지토리.
            tenant_id: 컬렉션이 속한 테넌트(회사) ID.
            entities: 미리 불러온 엔티티. 생략하면 리포지토리에서 테넌트의 엔티티를 불러옵니다.
        """
        self.repository = repository
        self.tenant_id = tenant_id
        if entities is None:
            entities = repository.list_by_tenant(tenant_id)
        self._entities: List[Any] = []
        self._ids = set()
        for entity in entities:
            self._append(entity)

    def __len__(self) -> int:
        return len(self._entities)

    def _append(self, entity):
        if entity.id in self._ids:
            raise PersistenceError(f"Duplicate {self.kind} id '{entity.id}' in collection.")
        self._ids.add(entity.id)
        self._entities.append(entity)

    def search_values(self, entity) -> Tuple[str, ...]:
        raise NotImplementedError

    def build(self, draft: Mapping[str, Any], errors: Dict[str, str]):
        raise NotImplementedError

    def _normalize_status(self, status: Optional[str]) -> Optional[str]:
        if status is None or status == "" or status == ALL_STATUSES:
            return None
        status = getattr(status, "value", status)
        valid = [s.value for s in self.status_enum]
        if status not in valid:
            raise ValidationError({"status": f"Unknown status '{status}'. Use 'all' or one of: {', '.join(valid)}."})
        return status

    def list(self, text: Optional[str] = None, status: Optional[str] = ALL_STATUSES) -> List[Any]:
        """
        검색어와 상태로 컬렉션을 필터링합니다.

        Args:
            text: 검색 필드에 대해 대소문자 구분 없이 부분 일치로 비교할 문자열.
            status: 정확히 일치해야 하는 상태 값. 'all'이면 상태로 거르지 않습니다.

        Returns:
            삽입 순서를 유지한 새 리스트.

        Raises:
            ValidationError: 알 수 없는 상태 값일 때.
        """
        status = self._normalize_status(status)
        needle = (text or "").strip().lower()

        result = []
        for entity in self._entities:
            if status is not None and entity.status != status:
                continue
            if needle and not any(needle in (value or "").lower() for value in self.search_values(entity)):
                continue
            result.append(entity)
        return result

    def board(self, text: Optional[str] = None, status: Optional[str] = ALL_STATUSES) -> Dict[str, List[Any]]:
        """필터링된 목록을 상태별로 묶습니다. 모든 상태가 선언 순서대로 키로 포함됩니다."""
        grouped = {s.value: [] for s in self.status_enum}
        for entity in self.list(text=text, status=status):
            grouped.setdefault(entity.status, []).append(entity)
        return grouped

    def create(self, draft: Mapping[str, Any]):
        """
        초안(draft)을 검증하여 새 엔티티를 만들고 컬렉션 끝에 추가합니다.
        ID는 저장소가 발급하며, 현재 컬렉션 크기와 무관합니다.

        Raises:
            ValidationError: 필수 필드가 비었거나 값 형식이 잘못되었을 때.
            PersistenceError: 저장소가 엔티티를 저장하지 못했을 때.
        """
        if not isinstance(draft, Mapping):
            raise ValidationError({"__all__": "Expected an object with the entity fields."})

        errors: Dict[str, str] = {}
        for field in self.required_fields:
            if not _text(draft, field):
                errors[field] = "This field is required."
        entity = self.build(draft, errors)
        if errors:
            raise ValidationError(errors)

        entity.tenant_id = self.tenant_id
        entity.progress = 0
        created = self.repository.create(entity)
        self._append(created)
        logger.info(
            "Created %s.", self.kind,
            extra={"entity_kind": self.kind, "entity_id": created.id, "tenant_id": self.tenant_id}
        )
        return created


class ProjectStore(EntityCollectionStore):
    """프로젝트 컬렉션. 이름과 설명으로 검색합니다."""
    kind = "project"
    status_enum = ProjectStatus
    required_fields = ("name", "start_date", "manager")

    def __init__(self, project_repo: IProjectRepository, tenant_id: int, entities=None):
        super().__init__(project_repo, tenant_id, entities)

    def search_values(self, entity: models.Project):
        return (entity.name, entity.description)

    def build(self, draft, errors) -> models.Project:
        start_date = _date(draft, "start_date", errors, required=True)
        end_date = _date(draft, "end_date", errors)
        _check_date_range(start_date, end_date, errors)
        return models.Project(
            name=_text(draft, "name"),
            description=_text(draft, "description"),
            status=ProjectStatus.PLANNING.value,
            start_date=start_date,
            end_date=end_date,
            budget=_amount(draft, "budget", errors),
            actual_cost=0.0,
            manager=_text(draft, "manager"),
        )


class WorkStore(EntityCollectionStore):
    """
    작업(obra) 컬렉션. 이름, 위치, 상위 프로젝트 이름으로 검색합니다.
    생성 시 project_id가 같은 테넌트의 프로젝트를 가리키는지 확인합니다.
    """
    kind = "work"
    status_enum = WorkStatus
    required_fields = ("name", "location", "project_id", "assignee")

    def __init__(
        self,
        work_repo: IWorkRepository,
        project_repo: IProjectRepository,
        tenant_id: int,
        entities=None,
        today: Callable[[], date] = date.today,
    ):
        self.project_repo = project_repo
        self._today = today
        super().__init__(work_repo, tenant_id, entities)

    def search_values(self, entity: models.Work):
        return (entity.name, entity.location, entity.project_name)

    def _project(self, draft, errors) -> Optional[models.Project]:
        raw = _text(draft, "project_id")
        if not raw:
            return None
        try:
            project_id = int(raw)
        except ValueError:
            errors["project_id"] = "Enter a valid project id."
            return None
        if not 1 <= project_id <= MAX_ENTITY_ID:
            errors["project_id"] = "Enter a valid project id."
            return None
        project = self.project_repo.find_by_id(project_id, self.tenant_id)
        if project is None:
            errors["project_id"] = f"Project '{project_id}' does not exist."
        return project

    def build(self, draft, errors) -> models.Work:
        project = self._project(draft, errors)
        start_date = _date(draft, "start_date", errors)
        end_date = _date(draft, "end_date", errors)
        _check_date_range(start_date, end_date, errors)
        planned_cost = _amount(draft, "planned_cost", errors)
        if errors:
            # 검증에 실패한 초안은 프로젝트와 관계를 맺지 않도록 모델을 만들지 않습니다.
            return None
        return models.Work(
            project_id=project.id if project is not None else None,
            project=project,
            name=_text(draft, "name"),
            description=_text(draft, "description"),
            location=_text(draft, "location"),
            status=WorkStatus.NOT_STARTED.value,
            planned_cost=planned_cost,
            actual_cost=0.0,
            start_date=start_date,
            end_date=end_date,
            assignee=_text(draft, "assignee"),
            last_update=self._today(),
        )
