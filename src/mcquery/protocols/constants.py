# src/mcquery/protocols/constants.py
"""
Minecraft Query 协议常量表 (Constants)

仅定义协议的结构性常量（如 Magic、包类型、偏移量、长度上限）。
"""

from enum import IntEnum

# =========================================================================
# 协议操作码 (Protocol Codes)
# =========================================================================
MAGIC_NUMBER = 0xFEFD  # 所有发往服务器的包的前缀
SESSION_MASK = 0x0F0F0F0F  # 每个字节只保留低 4 位


class PacketType(IntEnum):
    """包头 Type 字段 (单字节)"""

    STAT = 0x00  # 状态查询 (Basic / Full)
    HANDSHAKE = 0x09  # 握手，获取 Token


# =========================================================================
# 结构长度 (Sizes)
# =========================================================================
# 请求包: Magic(2B) + Type(1B) + SessionID(4B) + Payload
HANDSHAKE_REQUEST_SIZE = 7
BASIC_STAT_REQUEST_SIZE = 11
FULL_STAT_REQUEST_SIZE = 15

# 响应包头: Type(1B) + SessionID(4B)
RESPONSE_HEADER_SIZE = 5

# 接收缓冲区上限
HANDSHAKE_RESPONSE_SIZE = 16
BASIC_STAT_RESPONSE_SIZE = 512
FULL_STAT_RESPONSE_SIZE = 1472

# =========================================================================
# FullStat 载荷结构
# =========================================================================
FULL_STAT_PADDING_START_SIZE = 11  # 载荷开头的固定填充 (splitnum + 0x80 0x00)
FULL_STAT_SECTIONS_SEPARATOR = b"\x00\x00\x01player_\x00\x00"  # KV 区与玩家区之间

# FullStat KV 区的必要键
FULL_STAT_REQUIRED_KEYS = (
    "hostname",
    "gametype",
    "game_id",
    "version",
    "plugins",
    "map",
    "numplayers",
    "maxplayers",
    "hostport",
    "hostip",
)

# 数值上限
U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF

# =========================================================================
# 默认值
# =========================================================================
DEFAULT_PORT = 25565
DEFAULT_TIMEOUT = 0.5  # 秒
TOKEN_LIFETIME = 30.0  # 秒，仅供参考，客户端不跟踪
