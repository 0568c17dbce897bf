# File: src/mcquery/clients/threaded.py
"""
线程池驱动的异步 Query 客户端。

协程 API 与 clients.aio 一致，但每一步都通过 asyncio.to_thread
交给默认线程池中的阻塞客户端执行。适合不想依赖事件循环 UDP 支持的场景。
"""

import asyncio

from ..config import QueryConfig
from ..core import generate_session_id
from ..exceptions import StateError
from ..protocols.constants import DEFAULT_TIMEOUT, U32_MAX
from ..protocols.responses import BasicStat, FullStat, Token
from ..state import QueryState
from . import blocking


class QueryClient:
    """在线程池中运行 blocking.QueryClient 的异步包装。"""

    def __init__(self, config: QueryConfig, session_id: int | None = None) -> None:
        self.config = config
        if session_id is None:
            session_id = generate_session_id()
        self._session_id = session_id & U32_MAX
        self._client: blocking.QueryClient | None = None
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
        if self._client is None:
            return QueryState(session_id=self._session_id)
        return self._client.state

    async def connect(self) -> blocking.QueryClient:
        """在线程池中创建阻塞客户端 (绑定与 DNS 解析可能阻塞)。"""
        if self._closed:
            raise StateError("客户端已关闭")
        if self._client is None:
            self._client = await asyncio.to_thread(
                blocking.QueryClient, self.config, self._session_id
            )
        return self._client

    async def handshake(self) -> Token:
        """发送握手包，返回 Token (约 30 秒内有效)。"""
        client = await self.connect()
        return await asyncio.to_thread(client.handshake)

    async def basic_stat(self, token: Token) -> BasicStat:
        """请求基础状态。Token 失效时服务器不回包，抛出 QueryTimeoutError。"""
        client = await self.connect()
        return await asyncio.to_thread(client.basic_stat, token)

    async def full_stat(self, token: Token) -> FullStat:
        """请求完整状态。Token 失效时服务器不回包，抛出 QueryTimeoutError。"""
        client = await self.connect()
        return await asyncio.to_thread(client.full_stat, token)

    async def close(self) -> None:
        self._closed = True
        if self._client is not None:
            self._client.close()

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


async def query(address: str, timeout: float | None = DEFAULT_TIMEOUT) -> FullStat:
    """便捷函数：握手后请求完整状态。

    任一步骤失败都直接抛出，不做重试。
    """
    config = QueryConfig.from_address(address, timeout=timeout)
    async with QueryClient(config) as client:
        token = await client.handshake()
        return await client.full_stat(token)
