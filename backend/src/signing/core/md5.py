"""MD5 message digest as specified in RFC 1321.

Used by the digest engine when the active crypto provider does not offer MD5
(FIPS-restricted builds, for example). MD5 is broken for collision resistance
and is kept for checksum compatibility only.
"""

import math
import struct

# Per-round left rotation amounts (RFC 1321, section 3.4)
_SHIFTS = (
    [7, 12, 17, 22] * 4
    + [5, 9, 14, 20] * 4
    + [4, 11, 16, 23] * 4
    + [6, 10, 15, 21] * 4
)

# T[i] = floor(abs(sin(i + 1)) * 2**32)
_T = [int(abs(math.sin(i + 1)) * 2**32) & 0xFFFFFFFF for i in range(64)]

_INIT = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476)

_MASK = 0xFFFFFFFF


def _rotl(x: int, n: int) -> int:
    return ((x << n) | (x >> (32 - n))) & _MASK


def _pad(message: bytes) -> bytes:
    bit_length = (len(message) * 8) & 0xFFFFFFFFFFFFFFFF
    padding = b"\x80" + b"\x00" * ((55 - len(message)) % 64)
    return message + padding + struct.pack("<Q", bit_length)


def md5_digest(data: bytes) -> bytes:
    """Return the 16-byte MD5 digest of `data`."""
    a0, b0, c0, d0 = _INIT
    padded = _pad(bytes(data))

    for offset in range(0, len(padded), 64):
        m = struct.unpack("<16I", padded[offset : offset + 64])
        a, b, c, d = a0, b0, c0, d0

        for i in range(64):
            if i < 16:
                f = (b & c) | (~b & d)
                g = i
            elif i < 32:
                f = (d & b) | (~d & c)
                g = (5 * i + 1) % 16
            elif i < 48:
                f = b ^ c ^ d
                g = (3 * i + 5) % 16
            else:
                f = c ^ (b | (~d & _MASK))
                g = (7 * i) % 16

            f = (f + a + _T[i] + m[g]) & _MASK
            a, d, c = d, c, b
            b = (b + _rotl(f, _SHIFTS[i])) & _MASK

        a0 = (a0 + a) & _MASK
        b0 = (b0 + b) & _MASK
        c0 = (c0 + c) & _MASK
        d0 = (d0 + d) & _MASK

    return struct.pack("<4I", a0, b0, c0, d0)
