# tests/services/test_identity_service.py
import pytest
from unittest.mock import MagicMock
import jwt

from construction_dashboard.services.identity_service import IdentityService, TOKEN_TTL_SECONDS
from construction_dashboard.services.exceptions import *
from construction_dashboard.repositories.interfaces import IUserRepository
from construction_dashboard.database import models
from construction_dashboard.utils.passwords import hash_password

SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
NOW = 1_700_000_000
EMAIL, PASSWORD = "admin@construcao.com", "admin123"

# ===================================================================
#  Fixture 설정
# ===================================================================

class FakeClock:
    """테스트에서 현재 시각을 직접 조정하기 위한 시계."""
    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> float:
        return self.now

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)

@pytest.fixture
def demo_user() -> models.User:
    return models.User(
        id=1, email=EMAIL, password_hash=hash_password(PASSWORD, rounds=4),
        display_name="Administrador", tenant_id=1
    )

@pytest.fixture
def mock_user_repo(demo_user: models.User) -> MagicMock:
    """IUserRepository에 대한 모의 객체. 데모 사용자 한 명만 알고 있습니다."""
    repo = MagicMock(spec=IUserRepository)
    repo.find_by_email.side_effect = lambda email: demo_user if email == EMAIL else None
    return repo

@pytest.fixture
def identity_service(mock_user_repo: MagicMock, clock: FakeClock) -> IdentityService:
    return IdentityService(mock_user_repo, SECRET_KEY, clock=clock, bcrypt_rounds=4)

# ===================================================================
#  초기화(Configuration) 테스트
# ===================================================================
class TestConfiguration:
    @pytest.mark.parametrize("secret", [None, ""])
    def test_missing_secret_aborts_initialization(self, mock_user_repo: MagicMock, secret):
        """서명 키가 없으면 기본값으로 진행하지 않고 ConfigurationError가 발생해야 합니다."""
        with pytest.raises(ConfigurationError):
            IdentityService(mock_user_repo, secret)

# ===================================================================
#  인증(Authenticate) 테스트
# ===================================================================
class TestAuthenticate:
    def test_authenticate_success(self, identity_service: IdentityService, mock_user_repo: MagicMock):
        """올바른 자격 증명으로 토큰을 발급받는 시나리오를 테스트합니다."""
        # === Act ===
        result = identity_service.authenticate(EMAIL, PASSWORD)

        # === Assert ===
        assert result["token"]
        assert result["subject"] == "1"
        assert result["tenant_id"] == 1
        assert result["name"] == "Administrador"
        assert result["issued_at"] == NOW
        assert result["expires_at"] - result["issued_at"] == 86400
        mock_user_repo.find_by_email.assert_called_once_with(EMAIL)

    def test_email_is_normalized_before_lookup(self, identity_service: IdentityService, mock_user_repo: MagicMock):
        identity_service.authenticate("  Admin@Construcao.com ", PASSWORD)
        mock_user_repo.find_by_email.assert_called_once_with(EMAIL)

    def test_unknown_email_and_wrong_password_are_indistinguishable(self, identity_service: IdentityService):
        """존재하지 않는 이메일과 틀린 비밀번호는 같은 예외와 같은 메시지를 가져야 합니다."""
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            identity_service.authenticate("nobody@construcao.com", PASSWORD)
        with pytest.raises(InvalidCredentialsError) as wrong_password:
            identity_service.authenticate(EMAIL, "wrong_password")

        assert type(unknown_email.value) is type(wrong_password.value)
        assert str(unknown_email.value) == str(wrong_password.value) == "Invalid email or password."

    def test_unknown_email_still_runs_password_comparison(self, mock_user_repo: MagicMock, clock: FakeClock, monkeypatch):
        """존재하지 않는 이메일도 bcrypt 비교를 거쳐야 합니다 (타이밍 차이 방지)."""
        from construction_dashboard.services import identity_service as module
        calls = []
        real_verify = module.verify_password
        monkeypatch.setattr(module, "verify_password", lambda p, h: calls.append(h) or real_verify(p, h))
        service = IdentityService(mock_user_repo, SECRET_KEY, clock=clock, bcrypt_rounds=4)

        with pytest.raises(InvalidCredentialsError):
            service.authenticate("nobody@construcao.com", PASSWORD)

        assert len(calls) == 1
        assert calls[0].startswith("$2")

    @pytest.mark.parametrize("email, password", [
        (None, PASSWORD),
        (EMAIL, None),
        ("", PASSWORD),
        (EMAIL, ""),
        ("   ", PASSWORD),
        (123, PASSWORD),
    ])
    def test_missing_fields_raise_malformed_request(self, identity_service: IdentityService, mock_user_repo: MagicMock, email, password):
        with pytest.raises(MalformedRequestError):
            identity_service.authenticate(email, password)
        mock_user_repo.find_by_email.assert_not_called()

# ===================================================================
#  토큰 검증(Validate) 및 갱신(Refresh) 테스트
# ===================================================================
class TestTokenValidation:
    def test_fresh_token_validates(self, identity_service: IdentityService):
        token = identity_service.authenticate(EMAIL, PASSWORD)["token"]

        claims = identity_service.validate_token(token)

        assert claims == {
            "subject": "1",
            "name": "Administrador",
            "tenant_id": 1,
            "issued_at": NOW,
            "expires_at": NOW + TOKEN_TTL_SECONDS,
        }

    def test_token_still_valid_just_before_expiry(self, identity_service: IdentityService, clock: FakeClock):
        token = identity_service.authenticate(EMAIL, PASSWORD)["token"]
        clock.now = NOW + 86399
        assert identity_service.validate_token(token)["subject"] == "1"

    def test_token_expired_after_one_day(self, identity_service: IdentityService, clock: FakeClock):
        """발급 후 86401초가 지나면 ExpiredSessionError가 발생해야 합니다."""
        token = identity_service.authenticate(EMAIL, PASSWORD)["token"]
        clock.now = NOW + 86401

        with pytest.raises(ExpiredSessionError):
            identity_service.validate_token(token)

    def test_token_signed_with_other_secret_is_invalid(self, identity_service: IdentityService):
        forged = jwt.encode(
            {"sub": "1", "tenant_id": 1, "iat": NOW, "exp": NOW + 60},
            "another-secret-key-that-is-long-enough", algorithm="HS256"
        )
        with pytest.raises(InvalidSessionError):
            identity_service.validate_token(forged)

    def test_token_missing_tenant_claim_is_invalid(self, identity_service: IdentityService):
        token = jwt.encode({"sub": "1", "iat": NOW, "exp": NOW + 60}, SECRET_KEY, algorithm="HS256")
        with pytest.raises(InvalidSessionError):
            identity_service.validate_token(token)

    def test_unsigned_token_is_invalid(self, identity_service: IdentityService):
        token = jwt.encode({"sub": "1", "tenant_id": 1, "iat": NOW, "exp": NOW + 60}, None, algorithm="none")
        with pytest.raises(InvalidSessionError):
            identity_service.validate_token(token)

    @pytest.mark.parametrize("token", [None, "", "not-a-token", "a.b.c"])
    def test_garbage_tokens_are_invalid(self, identity_service: IdentityService, token):
        with pytest.raises(InvalidSessionError):
            identity_service.validate_token(token)

    def test_validate_has_no_side_effects(self, identity_service: IdentityService, mock_user_repo: MagicMock):
        token = identity_service.authenticate(EMAIL, PASSWORD)["token"]
        mock_user_repo.reset_mock()

        identity_service.validate_token(token)
        identity_service.validate_token(token)

        assert mock_user_repo.method_calls == []

    def test_refresh_issues_new_window(self, identity_service: IdentityService, clock: FakeClock):
        token = identity_service.authenticate(EMAIL, PASSWORD)["token"]
        clock.now = NOW + 3600

        refreshed = identity_service.refresh_token(token)

        assert refreshed["issued_at"] == NOW + 3600
        assert refreshed["expires_at"] == NOW + 3600 + 86400
        assert refreshed["subject"] == "1"
        assert refreshed["tenant_id"] == 1
        assert identity_service.validate_token(refreshed["token"])["issued_at"] == NOW + 3600

    def test_refresh_rejects_expired_token(self, identity_service: IdentityService, clock: FakeClock):
        token = identity_service.authenticate(EMAIL, PASSWORD)["token"]
        clock.now = NOW + 86401
        with pytest.raises(ExpiredSessionError):
            identity_service.refresh_token(token)
