"""비밀번호 해싱 및 검증 유틸리티 모듈.

Password hashing and verification for user accounts (bcrypt).
"""

import bcrypt


def hash_password(password: str) -> str:
    """평문 비밀번호를 bcrypt 해시로 변환합니다.

    Hash a plain text password with a fresh bcrypt salt.

    Args:
        password: 평문 비밀번호 (Plain text password)

    Returns:
        str: bcrypt 해시 문자열 (Bcrypt hash string, ~60 chars)
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """평문 비밀번호와 저장된 해시를 비교합니다 — Constant-time bcrypt check."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # 손상된 해시 — Malformed stored hash never authenticates
        return False
