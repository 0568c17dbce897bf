# File: src/mcquery/protocols/packets.py
"""
Minecraft Query 请求封包构建器 (Packet Builders)

负责将会话参数转换为符合协议规范的二进制字节流 (bytes)。
本模块是无状态的 (Stateless)，不持有任何配置或会话信息。

发往服务器的包结构 (大端序):
    Magic(2B, 0xFEFD) + Type(1B) + SessionID(4B, 已掩码) + Payload(N * 4B)

服务器返回的包结构:
    Type(1B) + SessionID(4B) + Payload
"""

import logging
import struct
from dataclasses import dataclass, field
from typing import ClassVar

from ..exceptions import ParseError, ParseErrorKind
from . import constants
from .constants import PacketType

logger = logging.getLogger(__name__)

_HEADER_FMT = ">HBI"
_WORD_FMT = ">I"
_RESPONSE_HEADER_FMT = ">BI"


def build_packet(
    packet_type: PacketType, session_id: int, *payload: int, size: int
) -> bytes:
    """构建一个发往服务器的 Query 请求包。

    Args:
        packet_type: 包类型 (握手 / 状态)。
        session_id: 会话 ID。发送前与 SESSION_MASK 按位与。
        *payload: 若干 32 位无符号整数，按大端序依次追加。
        size: 该类型请求包的固定总长度。

    Returns:
        bytes: 构建好的请求包。

    Raises:
        ValueError: 布局长度与 size 不一致 (调用方传错了 payload 个数)。
    """
    pkt = bytearray(
        struct.pack(
            _HEADER_FMT,
            constants.MAGIC_NUMBER,
            packet_type,
            session_id & constants.SESSION_MASK,
        )
    )
    for word in payload:
        pkt.extend(struct.pack(_WORD_FMT, word & constants.U32_MAX))

    if len(pkt) != size:
        raise ValueError(f"请求包长度错误: 期望 {size} 字节，实际 {len(pkt)} 字节")
    return bytes(pkt)


@dataclass(frozen=True)
class _RequestPacket:
    """请求包值类型的公共部分。子类声明 SIZE 并实现 _build。"""

    SIZE: ClassVar[int] = 0

    session_id: int
    data: bytes = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", self._build())
        logger.debug("%s: %s", self.__class__.__name__, self.data.hex())

    def _build(self) -> bytes:
        raise NotImplementedError

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return self.SIZE


@dataclass(frozen=True)
class HandshakeRequest(_RequestPacket):
    """握手请求包，7 字节，无载荷。"""

    SIZE: ClassVar[int] = constants.HANDSHAKE_REQUEST_SIZE

    def _build(self) -> bytes:
        return build_packet(PacketType.HANDSHAKE, self.session_id, size=self.SIZE)


@dataclass(frozen=True)
class BasicStatRequest(_RequestPacket):
    """基础状态请求包，11 字节，载荷为握手得到的 Token。"""

    SIZE: ClassVar[int] = constants.BASIC_STAT_REQUEST_SIZE

    token: int = 0

    def _build(self) -> bytes:
        return build_packet(
            PacketType.STAT, self.session_id, self.token, size=self.SIZE
        )


@dataclass(frozen=True)
class FullStatRequest(_RequestPacket):
    """完整状态请求包，15 字节。

    载荷为 Token + 4 字节全零填充。填充是协议要求的，服务器据此区分 Full 与 Basic。
    """

    SIZE: ClassVar[int] = constants.FULL_STAT_REQUEST_SIZE

    token: int = 0

    def _build(self) -> bytes:
        return build_packet(
            PacketType.STAT, self.session_id, self.token, 0, size=self.SIZE
        )


def split_response(data: bytes) -> tuple[int, int, bytes]:
    """拆分服务器响应包的包头与载荷。

    Args:
        data: 接收到的 UDP 数据。

    Returns:
        tuple[int, int, bytes]:
            - packet_type: 包类型字节。
            - session_id: 服务器回显的会话 ID。
            - payload: 去掉 5 字节包头后的载荷。

    Raises:
        ParseError: 数据不足 5 字节 (INSUFFICIENT_DATA)。
    """
    if len(data) < constants.RESPONSE_HEADER_SIZE:
        raise ParseError(
            ParseErrorKind.INSUFFICIENT_DATA,
            f"响应包长度 {len(data)} 不足以容纳包头",
        )

    packet_type, session_id = struct.unpack_from(_RESPONSE_HEADER_FMT, data)
    return packet_type, session_id, data[constants.RESPONSE_HEADER_SIZE :]
