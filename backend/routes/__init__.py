"""FastAPI 라우터 모듈.

app.py에서 분리된 API 엔드포인트들을 제공합니다.
"""

from .health import router as health_router
from .session import router as session_router, init_session_routes
from .deps import verify_auth_header, verify_ws_token

__all__ = [
    "health_router",
    "session_router",
    "init_session_routes",
    "verify_auth_header",
    "verify_ws_token",
]
