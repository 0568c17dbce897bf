# File: src/mcquery/core.py
"""
Minecraft Query 核心逻辑 (Core)

职责：
1. 会话管理：生成 Session ID，维护 UNAUTHENTICATED -> AUTHENTICATED -> DONE 状态。
2. 请求编排：为握手 / 基础状态 / 完整状态生成一次 "发送-接收" 交换 (Exchange)。
3. 响应处理：剥离包头、分发到对应解析器、更新状态。

本模块不做任何 I/O。阻塞、线程池、asyncio 三种客户端只负责搬运字节，
共享这里的全部协议逻辑。
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Generic, TypeVar

from .config import QueryConfig
from .exceptions import ParseError, QueryError
from .protocols import constants, packets
from .protocols.constants import PacketType
from .protocols.responses import BasicStat, FullStat, Token
from .state import QueryState, SessionStatus

logger = logging.getLogger(__name__)

R = TypeVar("R")


def generate_session_id() -> int:
    """由当前时间 (纳秒) 截断为 32 位得到 Session ID。"""
    return time.time_ns() & constants.U32_MAX


@dataclass(frozen=True)
class Exchange(Generic[R]):
    """一次 "发送请求 - 接收响应" 交换的描述。

    Attributes:
        name: 步骤名 (用于日志与错误记录)。
        request: 待发送的请求包。
        response_size: 接收缓冲区上限，超出部分被丢弃。
        handler: 处理完整响应包 (含包头) 的回调。
    """

    name: str
    request: bytes
    response_size: int
    handler: Callable[[bytes], R]

    def complete(self, data: bytes) -> R:
        """交给 Core 解析接收到的响应包。"""
        return self.handler(data)


class QueryCore:
    """Query 协议核心逻辑，与传输方式无关。"""

    def __init__(self, config: QueryConfig, session_id: int | None = None) -> None:
        """初始化核心逻辑。

        Args:
            config: 客户端配置。
            session_id: 指定 Session ID；默认由当前时间生成。
        """
        self.config = config
        if session_id is None:
            session_id = generate_session_id()
        self._state = QueryState(session_id=session_id & constants.U32_MAX)
        logger.debug(
            f"Query 会话已创建: server={config.host}:{config.port} "
            f"session_id=0x{self._state.session_id:08x}"
        )

    @property
    def state(self) -> QueryState:
        """获取当前会话状态的只读副本。"""
        return replace(self._state)

    @property
    def session_id(self) -> int:
        return self._state.session_id

    # ---------------------------------------------------------------------
    # 请求构建
    # ---------------------------------------------------------------------

    def handshake(self) -> Exchange[Token]:
        """生成握手交换。响应解析为 Token。"""
        request = packets.HandshakeRequest(self.session_id)
        return Exchange(
            name="handshake",
            request=bytes(request),
            response_size=constants.HANDSHAKE_RESPONSE_SIZE,
            handler=self._handle_handshake,
        )

    def basic_stat(self, token: Token) -> Exchange[BasicStat]:
        """生成基础状态交换。Token 过期时服务器不回包，表现为接收超时。"""
        request = packets.BasicStatRequest(self.session_id, int(token))
        return Exchange(
            name="basic_stat",
            request=bytes(request),
            response_size=constants.BASIC_STAT_RESPONSE_SIZE,
            handler=lambda data: self._handle_stat("basic_stat", data, BasicStat),
        )

    def full_stat(self, token: Token) -> Exchange[FullStat]:
        """生成完整状态交换。Token 过期时服务器不回包，表现为接收超时。"""
        request = packets.FullStatRequest(self.session_id, int(token))
        return Exchange(
            name="full_stat",
            request=bytes(request),
            response_size=constants.FULL_STAT_RESPONSE_SIZE,
            handler=lambda data: self._handle_stat("full_stat", data, FullStat),
        )

    # ---------------------------------------------------------------------
    # 响应处理
    # ---------------------------------------------------------------------

    def fail(self, step: str, error: QueryError) -> None:
        """记录某一步骤的失败。由客户端在网络异常时调用。"""
        self._state.status = SessionStatus.ERROR
        self._state.last_error = f"{step}: {error}"
        logger.warning(f"[{step}] 请求失败: {error}")

    def _payload(self, step: str, data: bytes, expected: PacketType) -> bytes:
        """剥离响应包头，返回载荷。包头不匹配只记录日志，不视为错误。"""
        packet_type, session_id, payload = packets.split_response(data)
        if packet_type != expected:
            logger.debug(f"[{step}] 响应包类型不符: 0x{packet_type:02x}")
        if session_id != self.session_id & constants.SESSION_MASK:
            logger.debug(f"[{step}] 响应 Session ID 不符: 0x{session_id:08x}")
        return payload

    def _handle_handshake(self, data: bytes) -> Token:
        try:
            payload = self._payload("handshake", data, PacketType.HANDSHAKE)
        except ParseError as e:
            self.fail("handshake", e)
            raise

        token = Token.from_payload(payload)
        self._state.token = token
        self._state.status = SessionStatus.AUTHENTICATED
        self._state.last_error = ""
        logger.debug(f"握手成功: token={token.value}")
        return token

    def _handle_stat(
        self, step: str, data: bytes, record: type[BasicStat] | type[FullStat]
    ):
        try:
            result = record.from_payload(self._payload(step, data, PacketType.STAT))
        except ParseError as e:
            self.fail(step, e)
            raise

        self._state.status = SessionStatus.DONE
        self._state.last_error = ""
        return result
