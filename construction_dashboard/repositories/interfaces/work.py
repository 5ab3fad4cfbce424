from abc import ABC, abstractmethod
from typing import List
from construction_dashboard.database import models

class IWorkRepository(ABC):
    @abstractmethod
    def create(self, work_model: models.Work) -> models.Work:
        """
        새로운 작업을 저장하고, 저장소가 발급한 ID가 채워진 모델을 반환합니다.

        Raises:
            PersistenceError: 저장에 실패했을 때.
        """
        pass

    @abstractmethod
    def list_by_tenant(self, tenant_id: int) -> List[models.Work]:
        """특정 테넌트의 모든 작업을 생성 순서(ID 오름차순)대로 조회합니다."""
        pass
