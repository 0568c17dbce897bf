"""
Minecraft Query 客户端 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量、字典或 "host:port" 地址字符串中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .exceptions import ConfigError
from .protocols.constants import DEFAULT_PORT, DEFAULT_TIMEOUT, U16_MAX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryConfig:
    """QueryClient 的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        host: 服务器主机名或 IP (不含端口)。
        port: 服务器 Query 端口 (默认 25565)。
        bind_ip: 本地绑定 IP (通常为 0.0.0.0)。
        bind_port: 本地绑定端口，0 表示由系统分配。
        timeout: 接收超时 (秒)，必须为正数。None 表示一直等待。

    Raises:
        ConfigError: 端口越界或超时不是正数。
    """

    host: str
    port: int = DEFAULT_PORT
    bind_ip: str = "0.0.0.0"
    bind_port: int = 0
    timeout: float | None = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        for name in ("port", "bind_port"):
            value = getattr(self, name)
            if not 0 <= value <= U16_MAX:
                raise ConfigError(f"端口超出范围 '{name}': {value}")
        # 0 会让 socket 进入非阻塞模式，而不是 "立即超时"
        if self.timeout is not None and not self.timeout > 0:
            raise ConfigError(f"超时必须为正数: {self.timeout}")

    @property
    def server_address(self) -> tuple[str, int]:
        return (self.host, self.port)

    @property
    def bind_address(self) -> tuple[str, int]:
        return (self.bind_ip, self.bind_port)

    @classmethod
    def from_address(
        cls, address: str, timeout: float | None = DEFAULT_TIMEOUT
    ) -> "QueryConfig":
        """由 "host" 或 "host:port" 字符串构建配置。

        未指定端口时使用默认端口 25565。
        """
        host, port = parse_address(address)
        return cls(host=host, port=port, timeout=timeout)


def parse_address(address: str) -> tuple[str, int]:
    """拆分 "host:port" 地址。

    Args:
        address: 形如 "example.com" 或 "example.com:25565" 的地址。

    Returns:
        tuple[str, int]: (host, port)。

    Raises:
        ConfigError: 端口不是合法的 16 位无符号整数。
    """
    if ":" not in address:
        return address, DEFAULT_PORT

    host, port_str = address.split(":", 1)
    if not port_str.isdigit() or int(port_str) > U16_MAX:
        raise ConfigError(f"地址中的端口无效: {address}")
    return host, int(port_str)


def create_config_from_dict(raw_data: dict[str, Any]) -> QueryConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。
    host 字段既可以是纯主机名，也可以是 "host:port"；
    但如果同时给出了 port 字段，host 中就不允许再带端口。

    Args:
        raw_data: 原始配置字典 (来自 TOML 或 Env)。

    Returns:
        QueryConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """
    try:

        def _to_port(key: str, default: int) -> int:
            val = raw_data.get(key, default)
            try:
                port = int(val)
            except (TypeError, ValueError):
                raise ConfigError(f"端口格式无效 '{key}': {val}")
            if not 0 <= port <= U16_MAX:
                raise ConfigError(f"端口超出范围 '{key}': {port}")
            return port

        def _to_timeout(key: str) -> float | None:
            val = raw_data.get(key, DEFAULT_TIMEOUT)
            if val is None or str(val).strip().lower() in ("", "none", "off"):
                return None
            try:
                timeout = float(val)
            except (TypeError, ValueError):
                raise ConfigError(f"超时格式无效 '{key}': {val}")
            if not timeout > 0:
                raise ConfigError(f"超时必须为正数: {timeout}")
            return timeout

        if not raw_data.get("host"):
            raise ConfigError("配置缺失: 缺少必要字段 'host'")
        host = str(raw_data["host"]).strip()

        if "port" in raw_data:
            if ":" in host:
                raise ConfigError(
                    f"IP 地址无效: 已单独指定端口，host 不能再包含端口 ({host})"
                )
            port = _to_port("port", DEFAULT_PORT)
        else:
            host, port = parse_address(host)

        return QueryConfig(
            host=host,
            port=port,
            bind_ip=str(raw_data.get("bind_ip", "0.0.0.0")),
            bind_port=_to_port("bind_port", 0),
            timeout=_to_timeout("timeout"),
        )

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"配置生成失败: {e}") from e


def load_config_from_toml(file_path: Path, profile: str = "default") -> QueryConfig:
    """从 TOML 文件加载配置。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [query]: 单服务器配置块。
    3. Root: 兼容根目录直接配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Returns:
        QueryConfig: 配置对象。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        raw_config = data["profile"][profile]
    elif "query" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [query] 节，忽略 profile='{profile}'。")
        raw_config = data["query"]
    else:
        raw_config = data

    return create_config_from_dict(raw_config)


def load_config_from_env() -> QueryConfig:
    """从环境变量加载配置。

    自动读取所有以 `MCQUERY_` 开头的环境变量，并映射到配置字段。
    例如: `MCQUERY_HOST` -> `host`。

    Returns:
        QueryConfig: 配置对象。

    Raises:
        ConfigError: 未检测到任何相关环境变量。
    """
    env_map = {
        "host": "HOST",
        "port": "PORT",
        "bind_ip": "BIND_IP",
        "bind_port": "BIND_PORT",
        "timeout": "TIMEOUT",
    }

    raw_data = {}
    for cfg_key, env_suffix in env_map.items():
        val = os.environ.get(f"MCQUERY_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 MCQUERY_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
