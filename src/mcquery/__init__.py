# src/mcquery/__init__.py
"""
mcquery v0.1.0
Minecraft 服务器 UDP Query 协议客户端库。
"""

# 暴露核心配置
from .config import (
    QueryConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
    parse_address,
)

# 暴露客户端与核心逻辑
from .clients import aio, blocking, threaded
from .clients.blocking import QueryClient, query
from .core import QueryCore

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    ConfigError,
    NetworkError,
    ParseError,
    ParseErrorKind,
    ProtocolError,
    QueryError,
    QueryTimeoutError,
    StateError,
)
from .protocols import BasicStat, FullStat, PacketType, Token
from .protocols.constants import DEFAULT_PORT, DEFAULT_TIMEOUT
from .state import QueryState, SessionStatus

__version__ = "0.1.0"

__all__ = [
    "QueryClient",
    "query",
    "aio",
    "blocking",
    "threaded",
    "QueryCore",
    "QueryConfig",
    "QueryState",
    "SessionStatus",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "parse_address",
    "Token",
    "BasicStat",
    "FullStat",
    "PacketType",
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT",
    "QueryError",
    "ConfigError",
    "NetworkError",
    "QueryTimeoutError",
    "ProtocolError",
    "ParseError",
    "ParseErrorKind",
    "StateError",
]
