# tests/test_clients.py
"""
三种客户端形态 (阻塞 / 线程池 / asyncio) 的回环测试。
假服务器见 conftest.FakeQueryServer。
"""

import asyncio
import time

import pytest

from mcquery.clients import aio, blocking, threaded
from mcquery.exceptions import (
    ConfigError,
    ParseError,
    ParseErrorKind,
    QueryTimeoutError,
    StateError,
)
from mcquery.protocols.responses import BasicStat, FullStat, Token
from mcquery.state import SessionStatus

EXPECTED_BASIC = BasicStat(
    motd="A Minecraft Server",
    gametype="SMP",
    map="world",
    numplayers=2,
    maxplayers=20,
    hostport=25565,
    hostip="127.0.0.1",
)


# =========================================================================
# 阻塞客户端
# =========================================================================


def test_blocking_handshake_and_stats(fake_server):
    with blocking.QueryClient(fake_server.config(), session_id=0xABCDEF12) as client:
        token = client.handshake()
        assert token == Token(9513307)
        assert client.state.status == SessionStatus.AUTHENTICATED

        assert client.basic_stat(token) == EXPECTED_BASIC
        full = client.full_stat(token)
        assert full.version == "1.7.10"
        assert full.player_list == ("AldanTanneo", "Dinnerbone")
        assert client.state.status == SessionStatus.DONE

    assert [len(r) for r in fake_server.requests] == [7, 11, 15]
    assert fake_server.requests[0][3:7] == b"\x0b\x0d\x0f\x02"


def test_blocking_from_address(fake_server):
    client = blocking.QueryClient.from_address(fake_server.address)
    try:
        assert client.config.port == fake_server.port
        assert client.handshake() == Token(9513307)
    finally:
        client.close()


def test_blocking_from_host(fake_server):
    client = blocking.QueryClient.from_host(
        "127.0.0.1", fake_server.port, bind_address=("127.0.0.1", 0), timeout=1.0
    )
    try:
        assert client.handshake() == Token(9513307)
    finally:
        client.close()


def test_blocking_from_host_rejects_port_in_host():
    with pytest.raises(ConfigError):
        blocking.QueryClient.from_host("127.0.0.1:25565", 25565)


def test_blocking_timeout(fake_server):
    fake_server.silent = True
    with blocking.QueryClient(fake_server.config(timeout=0.2)) as client:
        with pytest.raises(QueryTimeoutError):
            client.handshake()
        assert client.state.status == SessionStatus.ERROR
        assert client.state.last_error.startswith("handshake")


def test_blocking_parse_error(fake_server):
    fake_server.full_payload = b"splitnum\x00\x80\x00no separator here"
    with blocking.QueryClient(fake_server.config()) as client:
        token = client.handshake()
        with pytest.raises(ParseError) as exc_info:
            client.full_stat(token)
        assert exc_info.value.kind == ParseErrorKind.STRUCTURAL


def test_blocking_closed_client(fake_server):
    client = blocking.QueryClient(fake_server.config())
    client.close()
    with pytest.raises(StateError):
        client.handshake()


def test_blocking_query(fake_server):
    full = blocking.query(fake_server.address)
    assert isinstance(full, FullStat)
    assert full.hostname == "A Minecraft Server"
    assert [len(r) for r in fake_server.requests] == [7, 15]


def test_blocking_query_stops_at_first_failure(fake_server):
    """握手失败时不会再发送完整状态请求，也不会重试"""
    fake_server.silent = True
    with pytest.raises(QueryTimeoutError):
        blocking.query(fake_server.address, timeout=0.2)
    assert len(fake_server.requests) == 1


def test_blocking_query_full_stat_failure(fake_server):
    fake_server.full_payload = b"short"
    with pytest.raises(ParseError) as exc_info:
        blocking.query(fake_server.address)
    assert exc_info.value.kind == ParseErrorKind.INSUFFICIENT_DATA
    assert [len(r) for r in fake_server.requests] == [7, 15]


# =========================================================================
# asyncio 客户端
# =========================================================================


@pytest.mark.asyncio
async def test_aio_handshake_and_stats(fake_server):
    async with aio.QueryClient(fake_server.config()) as client:
        token = await client.handshake()
        assert token == Token(9513307)
        assert await client.basic_stat(token) == EXPECTED_BASIC
        full = await client.full_stat(token)
        assert full.player_list == ("AldanTanneo", "Dinnerbone")
        assert client.state.status == SessionStatus.DONE


@pytest.mark.asyncio
async def test_aio_connects_on_first_request(fake_server):
    client = aio.QueryClient(fake_server.config())
    try:
        assert await client.handshake() == Token(9513307)
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_aio_timeout(fake_server):
    fake_server.silent = True
    async with aio.QueryClient(fake_server.config(timeout=0.2)) as client:
        with pytest.raises(QueryTimeoutError):
            await client.handshake()
        assert client.state.status == SessionStatus.ERROR


@pytest.mark.asyncio
async def test_aio_closed_client(fake_server):
    client = await aio.QueryClient.from_address(fake_server.address)
    await client.close()
    with pytest.raises(StateError):
        await client.handshake()


@pytest.mark.asyncio
async def test_aio_query(fake_server):
    full = await aio.query(fake_server.address)
    assert full.maxplayers == 20
    assert [len(r) for r in fake_server.requests] == [7, 15]


# =========================================================================
# 线程池客户端
# =========================================================================


@pytest.mark.asyncio
async def test_threaded_handshake_and_stats(fake_server):
    async with threaded.QueryClient(fake_server.config()) as client:
        token = await client.handshake()
        assert token == Token(9513307)
        assert await client.basic_stat(token) == EXPECTED_BASIC
        full = await client.full_stat(token)
        assert full.game_id == "MINECRAFT"
        assert client.state.status == SessionStatus.DONE


@pytest.mark.asyncio
async def test_threaded_timeout(fake_server):
    fake_server.silent = True
    async with threaded.QueryClient(fake_server.config(timeout=0.2)) as client:
        with pytest.raises(QueryTimeoutError):
            await client.handshake()
        assert client.state.status == SessionStatus.ERROR


@pytest.mark.asyncio
async def test_threaded_closed_client(fake_server):
    client = await threaded.QueryClient.from_address(fake_server.address)
    await client.close()
    with pytest.raises(StateError):
        await client.handshake()


@pytest.mark.asyncio
async def test_threaded_query(fake_server):
    full = await threaded.query(fake_server.address)
    assert full.hostport == 25565
    assert [len(r) for r in fake_server.requests] == [7, 15]


# =========================================================================
# 三种形态行为一致
# =========================================================================


@pytest.mark.asyncio
async def test_all_shapes_return_equal_records(fake_server):
    sync_full = blocking.query(fake_server.address)
    aio_full = await aio.query(fake_server.address)
    threaded_full = await threaded.query(fake_server.address)
    assert sync_full == aio_full == threaded_full


# =========================================================================
# 迟到的响应不会被当作下一次请求的应答
# =========================================================================

LATE_HANDSHAKE_REPLY = b"\x09\x00\x00\x00\x001\x00"


def test_blocking_drops_late_reply(fake_server):
    with blocking.QueryClient(fake_server.config()) as client:
        fake_server.sock.sendto(
            LATE_HANDSHAKE_REPLY, client.transport.sock.getsockname()
        )
        time.sleep(0.05)
        assert client.handshake() == Token(9513307)


@pytest.mark.asyncio
async def test_aio_drops_late_reply(fake_server):
    async with aio.QueryClient(fake_server.config()) as client:
        sockname = client.transport.transport.get_extra_info("sockname")
        fake_server.sock.sendto(LATE_HANDSHAKE_REPLY, sockname)
        await asyncio.sleep(0.05)
        assert await client.handshake() == Token(9513307)


# =========================================================================
# 超时配置在各形态下一致
# =========================================================================


@pytest.mark.parametrize("timeout", [0, -1])
def test_blocking_rejects_non_positive_timeout(fake_server, timeout):
    with pytest.raises(ConfigError, match="超时必须为正数"):
        blocking.query(fake_server.address, timeout=timeout)
    assert fake_server.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("timeout", [0, -1])
async def test_async_shapes_reject_non_positive_timeout(fake_server, timeout):
    with pytest.raises(ConfigError, match="超时必须为正数"):
        await aio.query(fake_server.address, timeout=timeout)
    with pytest.raises(ConfigError, match="超时必须为正数"):
        await threaded.query(fake_server.address, timeout=timeout)
    assert fake_server.requests == []


def test_create_config_rejects_zero_timeout(fake_server):
    with pytest.raises(ConfigError):
        blocking.QueryClient.from_host("127.0.0.1", fake_server.port, timeout=0)


# =========================================================================
# 会话状态在构造后即可读取
# =========================================================================


@pytest.mark.asyncio
async def test_state_available_before_first_request(fake_server):
    config = fake_server.config()
    blocking_client = blocking.QueryClient(config, session_id=0x11223344)
    aio_client = aio.QueryClient(config, session_id=0x11223344)
    threaded_client = threaded.QueryClient(config, session_id=0x11223344)
    try:
        for client in (blocking_client, aio_client, threaded_client):
            assert client.state.session_id == 0x11223344
            assert client.state.status == SessionStatus.UNAUTHENTICATED
    finally:
        blocking_client.close()
        await aio_client.close()
        await threaded_client.close()


@pytest.mark.asyncio
async def test_threaded_keeps_session_id_after_connect(fake_server):
    client = threaded.QueryClient(fake_server.config())
    session_id = client.state.session_id
    async with client:
        await client.handshake()
        assert client.state.session_id == session_id
