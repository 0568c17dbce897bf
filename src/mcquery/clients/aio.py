# File: src/mcquery/clients/aio.py
"""
asyncio Query 客户端 (单线程协作式)。

    async with QueryClient(QueryConfig.from_address("play.example.com")) as client:
        token = await client.handshake()
        full = await client.full_stat(token)

挂起只发生在接收步骤，超时由 asyncio.wait_for 控制。
"""

from typing import TypeVar

from ..config import QueryConfig
from ..core import Exchange, QueryCore
from ..exceptions import QueryError, StateError
from ..network import AsyncUdpTransport
from ..protocols.constants import DEFAULT_TIMEOUT
from ..protocols.responses import BasicStat, FullStat, Token
from ..state import QueryState

R = TypeVar("R")


class QueryClient:
    """基于 asyncio 数据报端点的 Query 客户端。

    首次请求时自动建立端点，也可以显式 await connect()。
    """

    def __init__(self, config: QueryConfig, session_id: int | None = None) -> None:
        self.config = config
        self.core = QueryCore(config, session_id)
        self.transport = AsyncUdpTransport(config)
        self._closed = False

    @classmethod
    async def from_address(
        cls, address: str, timeout: float | None = DEFAULT_TIMEOUT
    ) -> "QueryClient":
        """由 "host" 或 "host:port" 构建并连接客户端。"""
        client = cls(QueryConfig.from_address(address, timeout=timeout))
        await client.connect()
        return client

    @property
    def state(self) -> QueryState:
        return self.core.state

    async def connect(self) -> None:
        if self._closed:
            raise StateError("客户端已关闭")
        if self.transport.transport is None:
            await self.transport.connect()

    async def handshake(self) -> Token:
        """发送握手包，返回 Token (约 30 秒内有效)。"""
        return await self._run(self.core.handshake())

    async def basic_stat(self, token: Token) -> BasicStat:
        """请求基础状态。Token 失效时服务器不回包，抛出 QueryTimeoutError。"""
        return await self._run(self.core.basic_stat(token))

    async def full_stat(self, token: Token) -> FullStat:
        """请求完整状态。Token 失效时服务器不回包，抛出 QueryTimeoutError。"""
        return await self._run(self.core.full_stat(token))

    async def _run(self, exchange: Exchange[R]) -> R:
        await self.connect()
        try:
            data = await self.transport.exchange(
                exchange.request, exchange.response_size
            )
        except QueryError as e:
            self.core.fail(exchange.name, e)
            raise
        return exchange.complete(data)

    async def close(self) -> None:
        self._closed = True
        await self.transport.close()

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


async def query(address: str, timeout: float | None = DEFAULT_TIMEOUT) -> FullStat:
    """便捷函数：握手后请求完整状态。

    任一步骤失败都直接抛出，不做重试。
    """
    client = await QueryClient.from_address(address, timeout=timeout)
    async with client:
        token = await client.handshake()
        return await client.full_stat(token)
