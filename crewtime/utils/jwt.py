"""JWT 토큰 생성 및 검증 유틸리티 모듈.

JWT token creation and verification utility module.

JWT Payload Structure:
    {
        "sub": "user_uuid",         # 사용자 ID (User identifier)
        "role": "crew_chief",       # 역할 이름 (Role name)
        "level": 3,                 # 역할 레벨 (Role level, lower = more authority)
        "jti": "random hex",        # 토큰 고유값 (Makes every issued token distinct)
        "exp": 1234567890,          # 만료 시간 UNIX timestamp (Expiration)
        "type": "access"|"refresh"  # 토큰 유형 (Token type discriminator)
    }
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from crewtime.config import settings


def _encode(data: dict[str, Any], token_type: str, lifetime: timedelta) -> str:
    to_encode: dict[str, Any] = data.copy()
    to_encode.update({
        "exp": datetime.now(timezone.utc) + lifetime,
        "type": token_type,
        "jti": secrets.token_hex(8),
    })
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(data: dict[str, Any]) -> str:
    """JWT 액세스 토큰을 생성합니다.

    Generate a JWT access token. Expires after
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES (default: 30 min).

    Args:
        data: JWT 페이로드 데이터 {"sub", "role", "level"} (Token payload)

    Returns:
        str: 인코딩된 JWT 문자열 (Encoded JWT token string)
    """
    return _encode(data, "access", timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(data: dict[str, Any]) -> str:
    """JWT 리프레시 토큰을 생성합니다.

    Generate a JWT refresh token. Expires after
    JWT_REFRESH_TOKEN_EXPIRE_DAYS (default: 7 days) and is also persisted
    server-side so it can be revoked on logout.
    """
    return _encode(data, "refresh", timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS))


def decode_token(token: str) -> dict[str, Any]:
    """JWT 토큰을 디코딩하고 검증합니다.

    Decode and verify a JWT token string.

    Raises:
        jwt.ExpiredSignatureError: 토큰 만료 시 (When token has expired)
        jwt.InvalidTokenError: 유효하지 않은 토큰 (When token is invalid)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
