# File: src/mcquery/clients/blocking.py
"""
阻塞式 Query 客户端。

    client = QueryClient.from_address("play.example.com:25565")
    token = client.handshake()
    basic = client.basic_stat(token)
    full = client.full_stat(token)
"""

from typing import TypeVar

from ..config import QueryConfig, create_config_from_dict
from ..core import Exchange, QueryCore
from ..exceptions import QueryError, StateError
from ..network import UdpTransport
from ..protocols.constants import DEFAULT_PORT, DEFAULT_TIMEOUT
from ..protocols.responses import BasicStat, FullStat, Token
from ..state import QueryState

R = TypeVar("R")


class QueryClient:
    """使用标准库 socket 的同步 Query 客户端。

    构造时即绑定并 connect UDP socket。一个实例同一时刻只处理一个请求。
    """

    def __init__(self, config: QueryConfig, session_id: int | None = None) -> None:
        """初始化客户端。

        Args:
            config: 客户端配置。
            session_id: 指定 Session ID；默认由当前时间生成。

        Raises:
            NetworkError: 绑定或连接失败。
        """
        self.config = config
        self.core = QueryCore(config, session_id)
        self.transport = UdpTransport(config)
        self.transport.connect()
        self._closed = False

    @classmethod
    def from_address(
        cls, address: str, timeout: float | None = DEFAULT_TIMEOUT
    ) -> "QueryClient":
        """由 "host" 或 "host:port" 构建客户端，未指定端口时使用 25565。"""
        return cls(QueryConfig.from_address(address, timeout=timeout))

    @classmethod
    def from_host(
        cls,
        host: str,
        port: int = DEFAULT_PORT,
        bind_address: tuple[str, int] = ("0.0.0.0", 0),
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> "QueryClient":
        """由主机、端口、本地绑定地址和超时构建客户端。host 中不能再带端口。"""
        config = create_config_from_dict(
            {
                "host": host,
                "port": port,
                "bind_ip": bind_address[0],
                "bind_port": bind_address[1],
                "timeout": timeout,
            }
        )
        return cls(config)

    @property
    def state(self) -> QueryState:
        return self.core.state

    def handshake(self) -> Token:
        """发送握手包，返回 Token (约 30 秒内有效)。"""
        return self._run(self.core.handshake())

    def basic_stat(self, token: Token) -> BasicStat:
        """请求基础状态。Token 失效时服务器不回包，抛出 QueryTimeoutError。"""
        return self._run(self.core.basic_stat(token))

    def full_stat(self, token: Token) -> FullStat:
        """请求完整状态。Token 失效时服务器不回包，抛出 QueryTimeoutError。"""
        return self._run(self.core.full_stat(token))

    def _run(self, exchange: Exchange[R]) -> R:
        if self._closed:
            raise StateError("客户端已关闭")
        try:
            data = self.transport.exchange(exchange.request, exchange.response_size)
        except QueryError as e:
            self.core.fail(exchange.name, e)
            raise
        return exchange.complete(data)

    def close(self) -> None:
        self._closed = True
        self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def query(address: str, timeout: float | None = DEFAULT_TIMEOUT) -> FullStat:
    """便捷函数：握手后请求完整状态。

    任一步骤失败都直接抛出，不做重试。
    """
    with QueryClient.from_address(address, timeout=timeout) as client:
        token = client.handshake()
        return client.full_stat(token)
