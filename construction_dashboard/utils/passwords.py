# construction_dashboard/utils/passwords.py
import bcrypt


def hash_password(plain_password: str, rounds: int = 12) -> str:
    """평문 비밀번호를 bcrypt로 해시합니다. rounds는 비용 계수(cost factor)입니다."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """
    평문 비밀번호를 저장된 bcrypt 해시와 비교합니다.
    해시 형식이 잘못된 경우에도 예외 대신 False를 반환합니다.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
