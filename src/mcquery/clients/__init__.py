# src/mcquery/clients/__init__.py
"""
Query 客户端适配层

三种调用形态共享 core.QueryCore 中的协议逻辑，行为完全一致:

- blocking: 同步阻塞。
- threaded: 协程 API，阻塞调用在默认线程池中执行。
- aio: 协程 API，直接使用 asyncio 数据报端点。
"""

from . import aio, blocking, threaded

__all__ = ["aio", "blocking", "threaded"]
