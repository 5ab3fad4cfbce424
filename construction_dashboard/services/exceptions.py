# construction_dashboard/services/exceptions.py
from typing import Dict, Optional

# --- Auth Exceptions ---
class InvalidCredentialsError(Exception):
    """이메일 또는 비밀번호가 일치하지 않을 때 (두 경우를 구분하지 않음)"""
    pass

class MalformedRequestError(Exception):
    """이메일 또는 비밀번호 필드가 누락되었을 때"""
    pass

class InvalidSessionError(Exception):
    """세션 토큰의 구조나 서명이 올바르지 않을 때"""
    pass

class ExpiredSessionError(Exception):
    """세션 토큰의 유효 기간이 지났을 때"""
    pass

# --- Creation/Validation Exceptions ---
class ValidationError(Exception):
    """
    엔티티 생성 시 필드 검증에 실패했을 때.
    errors 속성에 필드 이름별 오류 메시지를 담습니다.
    """
    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        self.errors = dict(errors)
        super().__init__(message or "Validation failed: " + ", ".join(sorted(self.errors)))

# --- Infrastructure Exceptions ---
class PersistenceError(Exception):
    """저장소(DB)에 엔티티를 저장하지 못했을 때"""
    pass

class ConfigurationError(Exception):
    """필수 설정(서명 키 등)이 없거나 잘못되어 초기화할 수 없을 때"""
    pass
