import logging
import secrets
import time
import uuid
from typing import Any, Callable, Dict, Optional

import jwt

from construction_dashboard.database.models.user import normalize_email
from construction_dashboard.repositories.interfaces import IUserRepository
from construction_dashboard.services.exceptions import (
    InvalidCredentialsError, MalformedRequestError, InvalidSessionError,
    ExpiredSessionError, ConfigurationError
)
from construction_dashboard.utils.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

TOKEN_TTL_SECONDS = 24 * 60 * 60
ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "tenant_id", "iat", "exp"]
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."


class IdentityService:
    """
    자격 증명 검증과 세션 토큰 발급/검증을 담당하는 서비스입니다.
    토큰은 서명된 무상태(stateless) JWT이며, 서버는 세션 저장소를 두지 않습니다.
    """

    def __init__(
        self,
        user_repo: IUserRepository,
        secret_key: Optional[str],
        token_ttl: int = TOKEN_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        bcrypt_rounds: int = 12,
        dummy_hash: Optional[str] = None,
    ):
        """
        IdentityService를 초기화합니다.

        Args:
            user_repo: 신원 레코드를 조회하기 위한 리포지토리.
            secret_key: 토큰 서명 키. 비어 있으면 초기화를 중단합니다.
            token_ttl: 토큰 유효 기간(초). 기본값은 24시간.
            clock: 현재 시각(epoch 초)을 반환하는 함수. 테스트에서 교체할 수 있습니다.
            bcrypt_rounds: 존재하지 않는 이메일 검증에 쓰이는 더미 해시의 비용 계수.
            dummy_hash: 미리 계산한 더미 해시. 요청마다 서비스를 만드는 경우 재사용합니다.

        Raises:
            ConfigurationError: 서명 키가 설정되지 않았을 때.
        """
        if not secret_key:
            raise ConfigurationError("A signing secret is required to issue session tokens.")
        self.user_repo = user_repo
        self._secret_key = secret_key
        self.token_ttl = token_ttl
        self._clock = clock
        # 존재하지 않는 이메일도 같은 비용의 bcrypt 비교를 거치게 하여 응답 시간 차이를 없앱니다.
        self._dummy_hash = dummy_hash or hash_password(secrets.token_hex(16), rounds=bcrypt_rounds)

    def _now(self) -> int:
        return int(self._clock())

    def authenticate(self, email: Any, password: Any) -> Dict[str, Any]:
        """
        이메일과 비밀번호를 검증하고, 성공 시 24시간 유효한 세션 토큰을 발급합니다.

        Returns:
            token, token_type, issued_at, expires_at, subject, name, tenant_id를 담은 딕셔너리.

        Raises:
            MalformedRequestError: 이메일 또는 비밀번호가 누락되었을 때.
            InvalidCredentialsError: 이메일이 없거나 비밀번호가 틀렸을 때 (두 경우를 구분하지 않음).
        """
        if not isinstance(email, str) or not isinstance(password, str) or not email.strip() or not password:
            raise MalformedRequestError("Email and password are required.")

        user = self.user_repo.find_by_email(normalize_email(email))
        if user is None:
            verify_password(password, self._dummy_hash)
            logger.warning("Authentication failed.")
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        if not verify_password(password, user.password_hash):
            logger.warning("Authentication failed.")
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        logger.info("User authenticated.", extra={"subject": user.id, "tenant_id": user.tenant_id})
        return self._issue(str(user.id), user.display_name, user.tenant_id)

    def validate_token(self, token: Any) -> Dict[str, Any]:
        """
        세션 토큰을 검증하고 클레임을 반환합니다. 부수 효과가 없습니다.

        Returns:
            subject, name, tenant_id, issued_at, expires_at을 담은 딕셔너리.

        Raises:
            InvalidSessionError: 토큰 구조, 서명, 필수 클레임에 문제가 있을 때.
            ExpiredSessionError: 토큰의 만료 시각이 지났을 때.
        """
        if not isinstance(token, str) or not token:
            raise InvalidSessionError("Session token is missing or invalid.")

        try:
            # 만료 검사는 주입된 clock 기준으로 직접 수행합니다.
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"verify_exp": False, "verify_iat": False, "require": REQUIRED_CLAIMS},
            )
        except jwt.InvalidTokenError:
            raise InvalidSessionError("Session token is missing or invalid.")

        issued_at, expires_at = payload["iat"], payload["exp"]
        if not isinstance(issued_at, int) or not isinstance(expires_at, int) or expires_at <= issued_at:
            raise InvalidSessionError("Session token is missing or invalid.")

        if self._now() >= expires_at:
            raise ExpiredSessionError("Session has expired.")

        return {
            "subject": payload["sub"],
            "name": payload.get("name", ""),
            "tenant_id": payload["tenant_id"],
            "issued_at": issued_at,
            "expires_at": expires_at,
        }

    def refresh_token(self, token: Any) -> Dict[str, Any]:
        """
        유효한 토큰을 같은 사용자/테넌트의 새 토큰으로 교체합니다. 유효 기간은 발급 시점부터 다시 계산됩니다.

        Raises:
            InvalidSessionError, ExpiredSessionError: validate_token과 동일.
        """
        claims = self.validate_token(token)
        return self._issue(claims["subject"], claims["name"], claims["tenant_id"])

    def _issue(self, subject: str, name: str, tenant_id: int) -> Dict[str, Any]:
        issued_at = self._now()
        expires_at = issued_at + self.token_ttl
        payload = {
            "sub": subject,
            "name": name,
            "tenant_id": tenant_id,
            "iat": issued_at,
            "exp": expires_at,
            "jti": uuid.uuid4().hex,
        }
        token = jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)
        return {
            "token": token,
            "token_type": "Bearer",
            "issued_at": issued_at,
            "expires_at": expires_at,
            "subject": subject,
            "name": name,
            "tenant_id": tenant_id,
        }
