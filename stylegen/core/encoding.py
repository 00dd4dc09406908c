"""Text and binary encodings used in generated source.

- string_to_encoded_string: C++ string literal with hex escapes and soft wrapping
- string_to_binary_array: `{ 0x.., ... }` initializer, 13 bytes per row
- hash_crc32: CRC-32 (IEEE 802.3, reflected) as a signed 32-bit integer
- palette_color_value: `rrggbb[aa]` hex used by theme files
"""

import numpy as np

from stylegen.core.types import Color

CRC32_POLY = 0x04C11DB7
LINE_BREAK = '\\\n'
WRAP_COLUMNS = 80
BYTES_PER_ROW = 13


def _to_bytes(data: bytes | str) -> bytes:
    return data.encode('utf-8') if isinstance(data, str) else data


def string_to_encoded_string(data: bytes | str) -> str:
    """Escape bytes into a double-quoted literal.

    A `""` break is inserted when a printable character follows a hex escape,
    otherwise the compiler would read it as another hex digit.
    """
    parts: list[str] = []
    length = 0
    last_cut = 0
    writing_hex = False
    wrapped = False

    def append(text: str) -> None:
        nonlocal length
        parts.append(text)
        length += len(text)

    for ch in _to_bytes(data):
        if length - last_cut > WRAP_COLUMNS:
            wrapped = True
            append(LINE_BREAK)
            last_cut = length
        if ch == 0x0A:
            writing_hex = False
            append('\\n')
        elif ch == 0x09:
            writing_hex = False
            append('\\t')
        elif ch in (0x22, 0x5C):
            writing_hex = False
            append('\\' + chr(ch))
        elif ch < 32 or ch > 127:
            writing_hex = True
            append(f'\\x{ch:02x}')
        else:
            if writing_hex:
                writing_hex = False
                append('""')
            append(chr(ch))
    return '"' + (LINE_BREAK if wrapped else '') + ''.join(parts) + '"'


def string_to_binary_array(data: bytes) -> str:
    rows: list[str] = []
    chars: list[str] = []
    for ch in data:
        if len(chars) >= BYTES_PER_ROW:
            rows.append(', '.join(chars))
            chars = []
        chars.append(f'0x{ch:02x}')
    if chars:
        rows.append(', '.join(chars))
    return '{' + ('\n' if len(rows) > 1 else ' ') + ',\n'.join(rows) + ' }'


def _reflect(value: int, bits: int) -> int:
    result = 0
    for i in range(bits):
        if value & (1 << i):
            result |= 1 << (bits - 1 - i)
    return result


def _build_crc_table() -> np.ndarray:
    poly = np.uint32(_reflect(CRC32_POLY, 32))
    table = np.arange(256, dtype=np.uint32)
    for _ in range(8):
        table = np.where(table & 1, (table >> 1) ^ poly, table >> 1).astype(np.uint32)
    return table


_CRC_TABLE = [int(v) for v in _build_crc_table()]


def hash_crc32(data: bytes | str) -> int:
    """CRC-32 of `data`, as the signed int32 embedded in generated code."""
    crc = 0xFFFFFFFF
    for ch in _to_bytes(data):
        crc = (crc >> 8) ^ _CRC_TABLE[(crc ^ ch) & 0xFF]
    crc ^= 0xFFFFFFFF
    return crc - 0x100000000 if crc & 0x80000000 else crc


def palette_color_value(color: Color) -> str:
    result = f'{color.red:02x}{color.green:02x}{color.blue:02x}'
    if color.alpha != 255:
        result += f'{color.alpha:02x}'
    return result
