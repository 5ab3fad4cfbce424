import enum


class ProjectStatus(str, enum.Enum):
    """프로젝트의 생애 주기 상태. 신규 프로젝트는 PLANNING으로 시작합니다."""
    PLANNING = "PLANNING"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class WorkStatus(str, enum.Enum):
    """작업(obra)의 상태. 신규 작업은 NOT_STARTED로 시작합니다."""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
