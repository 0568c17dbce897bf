# File: src/mcquery/protocols/responses.py
"""
Minecraft Query 响应解析器 (Response Parsers)

将去掉包头后的载荷解析为强类型记录。
所有解析器都在发现问题的位置立即抛出 ParseError，不返回部分记录；
唯一的例外是 Token：它总能得到一个值。
"""

import logging
import struct
from dataclasses import dataclass

from ..exceptions import ParseError, ParseErrorKind
from ..utils import decimal_from_bytes, latin1_to_string, pairs, split_at_subslice
from . import constants

logger = logging.getLogger(__name__)


def _not_enough_data(detail: str) -> ParseError:
    return ParseError(ParseErrorKind.INSUFFICIENT_DATA, detail)


# =========================================================================
# Handshake (0x09)
# =========================================================================


@dataclass(frozen=True)
class Token:
    """握手返回的 Query Token，有效期约 30 秒。"""

    value: int

    @classmethod
    def from_payload(cls, payload: bytes) -> "Token":
        """从握手响应载荷解析 Token。

        载荷是以 \\0 结尾的十进制 ASCII 数字。遇到第一个非数字字节 (通常就是 \\0)
        即停止，永不失败：全是非数字时得到 Token(0)。

        Args:
            payload: 去掉包头后的载荷。

        Returns:
            Token: 解析出的 Token。
        """
        value = 0
        for b in payload:
            if not 0x30 <= b <= 0x39:
                break
            value = (value * 10 + (b - 0x30)) & constants.U32_MAX
        return cls(value)

    def __int__(self) -> int:
        return self.value


# =========================================================================
# Basic Stat (0x00)
# =========================================================================


@dataclass(frozen=True)
class BasicStat:
    """服务器基础状态。

    Attributes:
        motd: 服务器列表中显示的 MOTD。
        gametype: 游戏类型，固定为 "SMP"。
        map: 默认世界名。
        numplayers: 在线人数。
        maxplayers: 最大人数。
        hostport: 服务器监听端口。
        hostip: 服务器监听 IP。
    """

    motd: str
    gametype: str
    map: str
    numplayers: int
    maxplayers: int
    hostport: int
    hostip: str

    @classmethod
    def from_payload(cls, payload: bytes) -> "BasicStat":
        """从基础状态响应载荷解析记录。

        载荷结构:
            motd\\0 gametype\\0 map\\0 numplayers\\0 maxplayers\\0 + Port(2B, 小端) + IP

        Raises:
            ParseError: 分段缺失 (INSUFFICIENT_DATA)，
                数值字段非法或端口字节不足 (MALFORMED_VALUE)。
        """
        values = iter(payload.split(b"\x00"))

        def _next(name: str) -> bytes:
            segment = next(values, None)
            if segment is None:
                raise _not_enough_data(f"缺少字段 '{name}'")
            return segment

        motd = latin1_to_string(_next("motd"))
        gametype = latin1_to_string(_next("gametype"))
        map_name = latin1_to_string(_next("map"))
        numplayers = decimal_from_bytes(_next("numplayers"), constants.U32_MAX)
        maxplayers = decimal_from_bytes(_next("maxplayers"), constants.U32_MAX)

        # 最后一段不以 \0 分隔: 端口 (2B 小端) 紧跟 IP 文本
        host = _next("hostport")
        if len(host) < 2:
            raise ParseError(
                ParseErrorKind.MALFORMED_VALUE, f"端口字段只有 {len(host)} 字节"
            )
        (hostport,) = struct.unpack_from("<H", host)
        hostip = latin1_to_string(host[2:])

        logger.debug(
            "basic_stat: players=%d/%d host=%s:%d",
            numplayers,
            maxplayers,
            hostip,
            hostport,
        )
        return cls(
            motd=motd,
            gametype=gametype,
            map=map_name,
            numplayers=numplayers,
            maxplayers=maxplayers,
            hostport=hostport,
            hostip=hostip,
        )


# =========================================================================
# Full Stat (0x00, 带填充)
# =========================================================================


def _parse_uint(values: dict[str, str], key: str, max_value: int) -> int:
    """KV 区数值字段: 必须是非空的十进制文本，且不超过上限。"""
    raw = values[key]
    if not raw:
        raise ParseError(ParseErrorKind.MALFORMED_VALUE, f"字段 '{key}' 为空")
    try:
        return decimal_from_bytes(raw.encode("latin-1"), max_value)
    except ParseError as e:
        raise ParseError(
            ParseErrorKind.MALFORMED_VALUE, f"字段 '{key}': {e.detail}"
        ) from e


@dataclass(frozen=True)
class FullStat:
    """服务器完整状态。

    Attributes:
        hostname: 服务器列表中显示的 MOTD。
        gametype: 游戏类型，固定为 "SMP"。
        game_id: 游戏 ID，固定为 "MINECRAFT"。
        version: 服务端版本 ("1.7.10"、"1.16.2" ...)。
        plugins: 插件列表，格式取决于服务端框架。
        map: 默认世界名。
        numplayers: 在线人数。
        maxplayers: 最大人数。
        hostport: 服务器监听端口。
        hostip: 服务器监听 IP。
        player_list: 在线玩家名，保持服务器返回的顺序。

    注意: numplayers 与 len(player_list) 不保证相等，解析器也不做校验。
    """

    hostname: str
    gametype: str
    game_id: str
    version: str
    plugins: str
    map: str
    numplayers: int
    maxplayers: int
    hostport: int
    hostip: str
    player_list: tuple[str, ...] = ()

    @staticmethod
    def _parse_kv_section(data: bytes) -> dict:
        """解析 KV 区，返回构造 FullStat 所需的关键字参数 (不含玩家列表)。"""
        values = {
            latin1_to_string(key): latin1_to_string(value)
            for key, value in pairs(data.split(b"\x00"))
        }

        for key in constants.FULL_STAT_REQUIRED_KEYS:
            if key not in values:
                raise _not_enough_data(f"缺少键 '{key}'")

        return {
            "hostname": values["hostname"],
            "gametype": values["gametype"],
            "game_id": values["game_id"],
            "version": values["version"],
            "plugins": values["plugins"],
            "map": values["map"],
            "numplayers": _parse_uint(values, "numplayers", constants.U32_MAX),
            "maxplayers": _parse_uint(values, "maxplayers", constants.U32_MAX),
            "hostport": _parse_uint(values, "hostport", constants.U16_MAX),
            "hostip": values["hostip"],
        }

    @classmethod
    def from_payload(cls, payload: bytes) -> "FullStat":
        """从完整状态响应载荷解析记录。

        载荷结构:
            填充(11B) + KV 区 (key\\0value\\0 ...) + 分隔符(12B) + 玩家区 (name\\0 ...)

        Raises:
            ParseError: 载荷不足 11 字节或缺少必要键 (INSUFFICIENT_DATA)，
                找不到分隔符 (STRUCTURAL)，数值字段非法 (MALFORMED_VALUE)。
        """
        if len(payload) < constants.FULL_STAT_PADDING_START_SIZE:
            raise _not_enough_data(f"FullStat 载荷只有 {len(payload)} 字节")

        sections = split_at_subslice(
            payload[constants.FULL_STAT_PADDING_START_SIZE :],
            constants.FULL_STAT_SECTIONS_SEPARATOR,
        )
        if sections is None:
            raise ParseError(ParseErrorKind.STRUCTURAL, "找不到玩家区分隔符")
        kv_section, players_section = sections

        fields = cls._parse_kv_section(kv_section)
        player_list = tuple(
            latin1_to_string(name) for name in players_section.split(b"\x00") if name
        )

        logger.debug(
            "full_stat: version=%s players=%d/%d names=%d",
            fields["version"],
            fields["numplayers"],
            fields["maxplayers"],
            len(player_list),
        )
        return cls(player_list=player_list, **fields)
