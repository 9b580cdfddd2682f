"""참가 토큰 발급 서비스 클라이언트.

외부 토큰 서비스에 (사용자, 룸)을 전달하고 인증 토큰을 받아옵니다.

Request:
    POST {endpoint}
    {"user_id": "...", "room_id": "...", "role": "host"}

Response:
    {"token": "..."}
"""

import asyncio
import logging
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)


class TokenService:
    """aiohttp 기반 토큰 발급 클라이언트.

    실패(전송 오류, 비정상 상태 코드, 토큰 누락)는 모두 None으로 보고하며
    재시도하지 않습니다.

    Attributes:
        endpoint (str): 토큰 발급 URL
        role (str): 요청할 역할
        timeout (float): 요청 타임아웃 (초)
    """

    def __init__(self, endpoint: str, role: str = "host", timeout: float = 10.0):
        self.endpoint = endpoint
        self.role = role
        self.timeout = timeout

    async def fetch_token(self, user: str, room: str) -> Optional[str]:
        """토큰을 요청합니다.

        Args:
            user: 사용자 ID (표시 이름)
            room: 룸 ID

        Returns:
            Optional[str]: 발급된 토큰, 실패 시 None
        """
        payload = {"user_id": user, "room_id": room, "role": self.role}
        client_timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as http:
                async with http.post(self.endpoint, json=payload) as response:
                    if response.status != 200:
                        body = await response.text()
                        logger.error(
                            f"[TokenService] 토큰 요청 실패: status={response.status}, body={body[:200]}"
                        )
                        return None
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"[TokenService] 토큰 서비스 연결 오류: {e}")
            return None
        except ValueError as e:
            logger.error(f"[TokenService] 응답 JSON 파싱 실패: {e}")
            return None

        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            logger.error(f"[TokenService] 응답에 토큰 없음: user={user}, room={room}")
            return None

        logger.info(f"[TokenService] 토큰 발급 완료: user={user}, room={room}")
        return token
