"""FastAPI Session Event Adapter Server.

이 모듈은 외부 화상회의 클라이언트(SDK)의 세션 콜백을 UI 계층으로 전달하는
서버의 컴포지션 루트입니다. 설정, 로깅, 이벤트 버스, 어댑터를 구성하고
REST/WebSocket 라우터에 연결합니다.

주요 기능:
    - 토큰 발급 후 고정 미디어 설정으로 클라이언트 구성 및 미리보기
    - 세션 이벤트(입장, 참가자 변경, 오류, 메시지 등) WebSocket 전달
    - 녹화/스트리밍 상태 및 로컬 참가자 권한 조회

Architecture:
    - SessionEventAdapter: 클라이언트 콜백 → 이벤트 변환
    - EventBus: 컴포지션 루트가 소유하는 브로드캐스트 버스
    - EventBusNoticePresenter: 토스트 알림을 버스로 발행
    - SESSION_CLIENT_FACTORY: 외부 SDK 바인딩 (module:callable)
"""
import glob
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# 환경변수 로드 (config/.env)
load_dotenv(Path(__file__).parent / "config" / ".env")

from modules import (  # noqa: E402
    EventBus,
    EventBusNoticePresenter,
    SessionEventAdapter,
    TokenService,
    get_session_settings,
    load_client_factory,
)
from routes import health_router, session_router, init_session_routes  # noqa: E402


# 로그 설정
os.makedirs("logs", exist_ok=True)
log_filename = f"logs/server_{datetime.now().strftime('%Y%m%d')}.log"

settings = get_session_settings()
ENV = os.getenv("ENV", "development")

# 로그 보관 기간 (일) - 기본 60일
LOG_RETENTION_DAYS = int(os.getenv("LOG_RETENTION_DAYS", "60"))


def cleanup_old_logs(log_dir: str = "logs", retention_days: int = LOG_RETENTION_DAYS) -> int:
    """오래된 로그 파일을 삭제합니다.

    Args:
        log_dir: 로그 디렉토리 경로
        retention_days: 보관 기간 (일)

    Returns:
        삭제된 파일 수
    """
    if not os.path.exists(log_dir):
        return 0

    cutoff_date = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0

    for log_file in glob.glob(os.path.join(log_dir, "server_*.log")):
        try:
            date_str = os.path.basename(log_file).replace("server_", "").replace(".log", "")
            if datetime.strptime(date_str, "%Y%m%d") < cutoff_date:
                os.remove(log_file)
                deleted_count += 1
        except (ValueError, OSError):
            continue

    return deleted_count


logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[
        logging.StreamHandler(),  # 콘솔 출력
        logging.FileHandler(log_filename, encoding="utf-8"),  # 파일 저장
    ]
)
logging.getLogger("aiohttp").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)
logger.info(f"로깅 초기화 완료: level={settings.LOG_LEVEL}, env={ENV}")


# 글로벌 인스턴스
event_bus = EventBus()
notice_presenter = EventBusNoticePresenter(event_bus)
token_service = TokenService(
    endpoint=settings.TOKEN_ENDPOINT,
    role=settings.TOKEN_ROLE,
    timeout=settings.TOKEN_REQUEST_TIMEOUT,
)


def build_adapter() -> Optional[SessionEventAdapter]:
    """설정된 클라이언트 팩토리로 어댑터를 생성합니다.

    SESSION_CLIENT_FACTORY가 비어 있으면 None을 반환하며,
    이 경우 세션 명령 API는 503으로 응답합니다.
    """
    if not settings.SESSION_CLIENT_FACTORY:
        logger.warning("SESSION_CLIENT_FACTORY 미설정, 세션 명령 비활성화")
        return None

    client_factory = load_client_factory(settings.SESSION_CLIENT_FACTORY)
    return SessionEventAdapter(
        token_service=token_service,
        client_factory=client_factory,
        bus=event_bus,
        notices=notice_presenter,
        log_level=settings.sdk_log_level,
    )


session_adapter = build_adapter()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI 앱의 생명주기를 관리하는 컨텍스트 매니저.

    Note:
        - 시작: 오래된 로그 정리
        - 종료: 활성 세션 퇴장
    """
    logger.info("세션 이벤트 어댑터 서버 시작 중...")

    deleted_logs = cleanup_old_logs()
    if deleted_logs > 0:
        logger.info(f"오래된 로그 파일 {deleted_logs}개 정리 완료 ({LOG_RETENTION_DAYS}일 이상)")

    yield

    logger.info("서버 종료 중...")
    if session_adapter is not None:
        session_adapter.leave()


app = FastAPI(title="Session Event Adapter Server", lifespan=lifespan)

# CORS - 개발 환경에서는 로컬 네트워크 허용
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"^http://(localhost|127\.0\.0\.1|192\.168\.\d{1,3}\.\d{1,3}):\d+$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 라우터 등록
app.include_router(health_router)
app.include_router(session_router)

# 세션 라우터에 어댑터와 이벤트 버스 전달
init_session_routes(session_adapter, event_bus)


@app.get("/")
async def root():
    """서버 상태 확인 엔드포인트."""
    return {"status": "ok", "service": "Session Event Adapter Server"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
