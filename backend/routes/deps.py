"""공유 의존성 모듈.

세션 라우터가 공통으로 사용하는 인증 의존성을 정의합니다.
ACCESS_PASSWORD가 비어 있으면 인증을 생략합니다.
"""

import hmac
import os
from typing import Optional

from fastapi import Header, HTTPException


def get_access_password() -> str:
    """환경변수에서 접근 비밀번호를 가져옵니다."""
    return os.getenv("ACCESS_PASSWORD", "")


def _matches(candidate: str, password: str) -> bool:
    return hmac.compare_digest(candidate.encode("utf-8"), password.encode("utf-8"))


async def verify_auth_header(authorization: Optional[str] = Header(None)) -> bool:
    """Authorization: Bearer 헤더를 검증합니다.

    Raises:
        HTTPException: 인증 실패 시 (401)
    """
    password = get_access_password()
    if not password:
        return True
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header required")
    scheme, _, credential = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credential:
        raise HTTPException(status_code=401, detail="Invalid authorization format")
    if not _matches(credential, password):
        raise HTTPException(status_code=401, detail="Invalid password")
    return True


def verify_ws_token(token: Optional[str]) -> bool:
    """WebSocket 쿼리 파라미터 토큰을 검증합니다."""
    password = get_access_password()
    if not password:
        return True
    return token is not None and _matches(token, password)
