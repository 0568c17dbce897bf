# src/mcquery/protocols/__init__.py
"""
Minecraft Query 协议层 (Protocol Layer)

本包负责协议数据包的纯粹构建 (Build) 与解析 (Parse)。

- 不包含任何 socket 操作或网络 I/O。
- 不包含任何状态管理 (State)。
- 不依赖于 core 或 network 层。
"""

from . import constants
from .constants import PacketType
from .packets import (
    BasicStatRequest,
    FullStatRequest,
    HandshakeRequest,
    build_packet,
    split_response,
)
from .responses import BasicStat, FullStat, Token

# 公共 API
__all__ = [
    "constants",
    "PacketType",
    "build_packet",
    "split_response",
    "HandshakeRequest",
    "BasicStatRequest",
    "FullStatRequest",
    "Token",
    "BasicStat",
    "FullStat",
]
