# tests/conftest.py
import socket
import struct
import sys
import threading
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from mcquery.config import QueryConfig

# 基础状态载荷 (端口 0xDD 0x63 小端 = 25565)
BASIC_PAYLOAD = b"A Minecraft Server\x00SMP\x00world\x002\x0020\x00\xdd\x63127.0.0.1\x00"

# 完整状态载荷: 11 字节填充 + KV 区 + 分隔符 + 玩家区
FULL_PAYLOAD = (
    b"splitnum\x00\x80\x00"
    b"hostname\x00A Minecraft Server\x00"
    b"gametype\x00SMP\x00game_id\x00MINECRAFT\x00"
    b"version\x001.7.10\x00plugins\x00\x00map\x00world\x00"
    b"numplayers\x002\x00maxplayers\x0020\x00"
    b"hostport\x0025565\x00hostip\x00127.0.0.1"
    b"\x00\x00\x01player_\x00\x00"
    b"AldanTanneo\x00Dinnerbone\x00\x00"
)

TOKEN_PAYLOAD = b"9513307\x00"


def make_response(packet_type: int, session_id: int, payload: bytes) -> bytes:
    """构造服务器响应包: Type(1B) + SessionID(4B) + Payload"""
    return struct.pack(">BI", packet_type, session_id) + payload


@pytest.fixture
def basic_payload() -> bytes:
    return BASIC_PAYLOAD


@pytest.fixture
def full_payload() -> bytes:
    return FULL_PAYLOAD


@pytest.fixture
def response():
    """[Fixture] 返回构造响应包的辅助函数。"""
    return make_response


@pytest.fixture
def valid_config():
    """[Fixture] 返回一个指向本机的 QueryConfig 对象。"""
    return QueryConfig(
        host="127.0.0.1",
        port=25565,
        bind_ip="127.0.0.1",
        bind_port=0,
        timeout=0.5,
    )


class FakeQueryServer:
    """本地回环上的假 Query 服务器，在后台线程中应答。

    - 握手包 (7B): 回 TOKEN_PAYLOAD
    - 基础状态 (11B): 回 basic_payload
    - 完整状态 (15B): 回 full_payload
    silent=True 时只记录请求，不回包。
    """

    def __init__(self, basic_payload=BASIC_PAYLOAD, full_payload=FULL_PAYLOAD):
        self.basic_payload = basic_payload
        self.full_payload = full_payload
        self.silent = False
        self.requests: list[bytes] = []
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(0.05)
        self.port = self.sock.getsockname()[1]
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    @property
    def address(self) -> str:
        return f"127.0.0.1:{self.port}"

    def config(self, timeout: float | None = 0.5) -> QueryConfig:
        return QueryConfig(
            host="127.0.0.1", port=self.port, bind_ip="127.0.0.1", timeout=timeout
        )

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._thread.join(timeout=2)
        self.sock.close()

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                data, addr = self.sock.recvfrom(2048)
            except TimeoutError:
                continue
            self.requests.append(data)
            if self.silent:
                continue

            packet_type = data[2]
            session = data[3:7]
            if len(data) == 7:
                payload = TOKEN_PAYLOAD
            elif len(data) == 11:
                payload = self.basic_payload
            else:
                payload = self.full_payload
            self.sock.sendto(bytes([packet_type]) + session + payload, addr)


@pytest.fixture
def fake_server():
    server = FakeQueryServer()
    server.start()
    yield server
    server.stop()
