# construction_dashboard/utils/color_bands.py
"""
진행률과 품질 점수를 화면 표시용 색상 구간(band)으로 변환하는 순수 함수 모음.
프로젝트와 작업(Work)에 동일한 규칙을 적용합니다.
"""
from typing import Optional

COMPLETED = "COMPLETED"
ON_HOLD = "ON_HOLD"
CANCELLED = "CANCELLED"

# 진행률 구간
BAND_HIGH = "high"
BAND_MID = "mid"
BAND_WARN = "warn"
BAND_LOW = "low"
BAND_CRITICAL = "critical"

# 품질 구간
QUALITY_GREEN = "green"
QUALITY_BLUE = "blue"
QUALITY_YELLOW = "yellow"
QUALITY_RED = "red"
QUALITY_NEUTRAL = "neutral"


def _status_value(status) -> str:
    return getattr(status, "value", status)


def clamp_progress(progress) -> int:
    """진행률을 0~100 사이의 정수로 제한합니다."""
    if progress is None:
        return 0
    return max(0, min(100, int(progress)))


def display_progress(progress, status) -> int:
    """
    화면에 표시할 진행률을 계산합니다.
    완료(COMPLETED)는 항상 100, 취소(CANCELLED)는 항상 0으로 표시합니다.
    """
    status = _status_value(status)
    if status == COMPLETED:
        return 100
    if status == CANCELLED:
        return 0
    return clamp_progress(progress)


def progress_color_band(progress, status) -> str:
    """
    진행률과 상태로 색상 구간을 결정합니다.

    Returns:
        'high'(>=80 또는 완료), 'mid'(>=50), 'warn'(>=25 또는 보류),
        'low'(<25), 'critical'(취소) 중 하나.
    """
    status = _status_value(status)
    if status == COMPLETED:
        return BAND_HIGH
    if status == ON_HOLD:
        return BAND_WARN
    if status == CANCELLED:
        return BAND_CRITICAL

    progress = clamp_progress(progress)
    if progress >= 80:
        return BAND_HIGH
    if progress >= 50:
        return BAND_MID
    if progress >= 25:
        return BAND_WARN
    return BAND_LOW


def quality_color_band(score: Optional[float]) -> str:
    """품질 점수(0~100)를 색상 구간으로 변환합니다. 점수가 없으면 'neutral'."""
    if score is None:
        return QUALITY_NEUTRAL
    if score >= 90:
        return QUALITY_GREEN
    if score >= 80:
        return QUALITY_BLUE
    if score >= 70:
        return QUALITY_YELLOW
    return QUALITY_RED
