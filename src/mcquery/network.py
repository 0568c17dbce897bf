# src/mcquery/network.py
"""
Minecraft Query 客户端 - 网络模块 (Network)

封装 UDP Socket 的创建、绑定、连接、发送和接收逻辑。
该模块屏蔽了底层 Socket 的复杂性，向客户端层提供纯粹的 bytes 收发接口。

- UdpTransport: 阻塞 socket，超时由 socket.settimeout 控制。
- AsyncUdpTransport: asyncio 数据报端点，超时由 asyncio.wait_for 控制。

两者的接收超时都抛出 QueryTimeoutError，其余 I/O 错误抛出 NetworkError。
"""

import asyncio
import logging
import socket
from typing import Optional, Union, cast

from .config import QueryConfig
from .exceptions import NetworkError, QueryTimeoutError
from .protocols import constants

logger = logging.getLogger(__name__)


class UdpTransport:
    """阻塞式 UDP 传输。每个客户端独占一个实例。"""

    def __init__(self, config: QueryConfig):
        self.config = config
        self.sock: Optional[socket.socket] = None

    def connect(self) -> None:
        """创建 socket，绑定本地地址并 connect 到服务器。"""
        try:
            self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self.sock.bind(self.config.bind_address)
            self.sock.connect(self.config.server_address)
            self.sock.settimeout(self.config.timeout)
            logger.debug(
                f"Socket 绑定成功: {self.sock.getsockname()} -> {self.config.server_address}"
            )
        except OSError as e:
            self.close()
            raise NetworkError(
                f"连接失败 {self.config.host}:{self.config.port}: {e}"
            ) from e

    def send(self, packet: bytes) -> None:
        """发送 UDP 数据包。"""
        if self.sock is None:
            raise NetworkError("Socket 未初始化")
        try:
            self.sock.send(packet)
        except OSError as e:
            raise NetworkError(f"发送失败: {e}") from e

    def receive(self, bufsize: int) -> bytes:
        """接收一个 UDP 数据包，超出 bufsize 的部分被丢弃。"""
        if self.sock is None:
            raise NetworkError("Socket 未初始化")
        try:
            return self.sock.recv(bufsize)
        except TimeoutError:
            raise QueryTimeoutError(f"接收超时 ({self.config.timeout}s)") from None
        except OSError as e:
            raise NetworkError(f"接收错误: {e}") from e

    def exchange(self, packet: bytes, bufsize: int) -> bytes:
        """发送请求并等待一个响应。

        发送前先丢弃缓冲区中残留的数据包 (例如上一次超时后才到达的迟到响应)，
        避免把它当成本次请求的应答。
        """
        self._drain()
        self.send(packet)
        return self.receive(bufsize)

    def _drain(self) -> None:
        """以非阻塞方式读空接收缓冲区，结束后恢复原超时设置。"""
        if self.sock is None:
            return
        self.sock.setblocking(False)
        try:
            while True:
                stale = self.sock.recv(constants.FULL_STAT_RESPONSE_SIZE)
                logger.debug(f"丢弃残留数据包: {stale.hex()}")
        except BlockingIOError:
            pass
        except OSError as e:
            # 上一次请求遗留的 ICMP 错误 (如端口不可达)
            logger.debug(f"丢弃残留错误: {e}")
        finally:
            self.sock.settimeout(self.config.timeout)

    def close(self) -> None:
        """关闭 Socket"""
        if self.sock:
            self.sock.close()
            self.sock = None
            logger.debug("Socket 已关闭")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class QueryUdpProtocol(asyncio.DatagramProtocol):
    """
    asyncio UDP 协议适配器。
    将回调风格的 datagram_received 转换为 Queue 模式，供上层 await 使用。
    """

    def __init__(self):
        self.transport: Optional[asyncio.DatagramTransport] = None
        # 队列内容可以是数据，也可以是异常对象（用于快速失败）
        self.queue: asyncio.Queue[Union[bytes, Exception]] = asyncio.Queue(
            maxsize=16
        )

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = cast(asyncio.DatagramTransport, transport)
        logger.debug("UDP Transport 已建立")

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        """接收数据并放入队列"""
        try:
            self.queue.put_nowait(data)
        except asyncio.QueueFull:
            logger.warning("UDP 接收队列已满，丢弃数据包")

    def error_received(self, exc: Exception) -> None:
        """处理 UDP 错误 (如 ICMP 端口不可达)"""
        logger.debug(f"UDP 错误: {exc}")
        self._propagate_error(exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        """处理连接断开"""
        if exc:
            logger.warning(f"UDP 连接断开: {exc}")
            self._propagate_error(exc)
        else:
            logger.debug("UDP 连接已正常关闭")
            self._propagate_error(NetworkError("连接已关闭"))
        self.transport = None

    def _propagate_error(self, exc: Exception) -> None:
        """将底层错误立即传播给等待中的 receive()"""
        if self.queue.full():
            # 队列满时腾出一个位置，保证错误能被传达
            self.queue.get_nowait()
        self.queue.put_nowait(exc)


class AsyncUdpTransport:
    """
    封装 asyncio UDP 操作的传输。
    """

    def __init__(self, config: QueryConfig):
        self.config = config
        self.protocol: Optional[QueryUdpProtocol] = None
        self.transport: Optional[asyncio.DatagramTransport] = None

    async def connect(self) -> None:
        """
        初始化 UDP Endpoint，绑定本地地址并 connect 到服务器。
        """
        loop = asyncio.get_running_loop()

        try:
            transport, protocol = await loop.create_datagram_endpoint(
                QueryUdpProtocol,
                local_addr=self.config.bind_address,
                remote_addr=self.config.server_address,
                family=socket.AF_INET,
            )
            self.transport = cast(asyncio.DatagramTransport, transport)
            self.protocol = cast(QueryUdpProtocol, protocol)
            logger.debug(
                f"Async Socket 绑定成功: {self.config.bind_address} -> {self.config.server_address}"
            )

        except OSError as e:
            await self.close()
            raise NetworkError(
                f"连接失败 {self.config.host}:{self.config.port}: {e}"
            ) from e

    async def send(self, packet: bytes) -> None:
        """
        发送 UDP 数据包。
        """
        if not self.transport:
            await self.connect()
        elif self.transport.is_closing():
            raise NetworkError("Transport 已关闭")

        assert self.transport is not None

        try:
            # sendto 是同步非阻塞的，直接调用
            self.transport.sendto(packet)
        except OSError as e:
            raise NetworkError(f"发送失败: {e}") from e

    async def receive(self, bufsize: int) -> bytes:
        """
        接收 UDP 数据包 (Async)，超出 bufsize 的部分被丢弃。

        使用 asyncio.wait_for 实现超时控制。
        """
        if not self.protocol:
            raise NetworkError("Protocol 未初始化")

        timeout = self.config.timeout
        try:
            item = await asyncio.wait_for(self.protocol.queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            raise QueryTimeoutError(f"接收超时 ({timeout}s)") from None

        # 检查取出来的是数据还是错误
        if isinstance(item, NetworkError):
            raise item
        if isinstance(item, Exception):
            raise NetworkError(f"接收错误: {item}") from item
        return item[:bufsize]

    async def exchange(self, packet: bytes, bufsize: int) -> bytes:
        """发送请求并等待一个响应。发送前丢弃队列中残留的迟到响应。"""
        self._drain()
        await self.send(packet)
        return await self.receive(bufsize)

    def _drain(self) -> None:
        if self.protocol is None:
            return
        while not self.protocol.queue.empty():
            stale = self.protocol.queue.get_nowait()
            if isinstance(stale, NetworkError):
                # 连接关闭的通知需要保留给 receive()
                self.protocol.queue.put_nowait(stale)
                break
            logger.debug(f"丢弃残留数据: {stale!r}")

    async def close(self) -> None:
        """关闭 Transport"""
        if self.transport:
            self.transport.close()
            self.transport = None
            logger.debug("UDP Transport 已关闭")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
