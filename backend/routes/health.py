"""Health Check API 라우터.

서비스 상태 확인을 위한 엔드포인트들을 제공합니다.
"""

from fastapi import APIRouter

from .session import get_adapter_status

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
async def health_check():
    """서비스 상태를 확인합니다.

    Returns:
        dict: 세션 클라이언트 구성 상태 정보
    """
    client_status, session_status = get_adapter_status()
    overall = "ok" if client_status == "ok" else "degraded"

    return {
        "status": overall,
        "services": {
            "session_client": client_status,
            "session": session_status,
        },
    }
