from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import validates
from ..database import Base


def normalize_email(email: str) -> str:
    return email.strip().lower()


class User(Base):
    """
    대시보드에 로그인할 수 있는 신원(identity) 레코드입니다.
    각 사용자는 하나의 테넌트(회사, companyId)에 소속되며, 생성 후 변경되지 않습니다.
    이메일은 항상 소문자로 정규화되어 저장됩니다.
    """
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    display_name = Column(String, nullable=False)
    tenant_id = Column(Integer, nullable=False, index=True)

    @validates("email")
    def _normalize_email(self, key, value):
        return normalize_email(value) if isinstance(value, str) else value
