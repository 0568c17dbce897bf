# File: src/mcquery/state.py
"""
Minecraft Query 客户端 - 状态模块

负责定义和存储单个客户端的会话状态。
本模块不包含业务逻辑，仅作为数据容器供 Core 读写。
"""

from dataclasses import dataclass
from enum import Enum, auto

from .protocols.responses import Token


class SessionStatus(Enum):
    """查询会话的状态枚举。

    状态流转示意:
    UNAUTHENTICATED -> AUTHENTICATED -> DONE
           |                 |
           v                 v
         ERROR             ERROR
    """

    UNAUTHENTICATED = auto()
    """初始状态，尚未握手。"""

    AUTHENTICATED = auto()
    """握手成功，已持有 Token (约 30 秒内有效，本地不跟踪过期)。"""

    DONE = auto()
    """至少完成了一次状态查询。Token 仍可复用。"""

    ERROR = auto()
    """最近一次请求失败 (网络错误或解析错误)。"""


@dataclass
class QueryState:
    """存储一个 QueryClient 的会话数据。

    Attributes:
        session_id: 客户端选择的会话 ID，服务器会在每个响应包头中回显。
        token: 最近一次握手得到的 Token。
        status: 当前会话状态。
        last_error: 最近一次错误信息描述。
    """

    session_id: int = 0
    token: Token | None = None
    status: SessionStatus = SessionStatus.UNAUTHENTICATED
    last_error: str = ""

    @property
    def is_authenticated(self) -> bool:
        """是否持有 Token (握手成功之后)。"""
        return self.status in (SessionStatus.AUTHENTICATED, SessionStatus.DONE)
