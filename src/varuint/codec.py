"""SQLite4 variable-length unsigned integer encoding.

Encodes 64-bit unsigned integers into 1 to 9 bytes. The first byte (the tag)
alone determines the total length, and encodings sort in the same order as the
values they represent when compared as unsigned byte strings.

Encoding format (V is the value, A0..A8 are the output bytes):
- V <= 240: A0 = V
- V <= 2287: A0 = (V-240)//256 + 241, A1 = (V-240)%256
- V <= 67823: A0 = 249, A1 = (V-2288)//256, A2 = (V-2288)%256
- V <= 2^24-1: A0 = 250, A1..A3 = V as a 3-byte big-endian integer
- V <= 2^32-1: A0 = 251, A1..A4 = 4-byte big-endian
- V <= 2^40-1: A0 = 252, A1..A5 = 5-byte big-endian
- V <= 2^48-1: A0 = 253, A1..A6 = 6-byte big-endian
- V <= 2^56-1: A0 = 254, A1..A7 = 7-byte big-endian
- otherwise: A0 = 255, A1..A8 = 8-byte big-endian

See: http://www.sqlite.org/src4/doc/trunk/www/varint.wiki
"""

MAX_VALUE = (1 << 64) - 1
MAX_LENGTH = 9

# Upper bounds (inclusive) of the 1-, 2- and 3-byte tiers
ONE_BYTE_MAX = 240
TWO_BYTE_MAX = 2287
THREE_BYTE_MAX = 67823

# Tag of the 3-byte tier; tags above it carry a (tag - 247)-byte big-endian payload
THREE_BYTE_TAG = 0xF9


class MalformedInputError(ValueError):
    """Raised when a buffer is too short for the varuint its tag byte declares.

    Attributes:
        offset: Position of the tag byte in the decoded buffer
        required: Total bytes the tag declares (0 if there was no tag byte)
        available: Bytes present from offset to the end of the buffer
    """

    def __init__(self, message: str, offset: int, required: int, available: int):
        super().__init__(message)
        self.offset = offset
        self.required = required
        self.available = available


def _check_value(value: int) -> None:
    # bool is an int subclass but never a meaningful integer to encode
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"Cannot encode non-integer value: {value!r}")
    if value < 0:
        raise ValueError(f"Cannot encode negative value: {value}")
    if value > MAX_VALUE:
        raise ValueError(f"Value {value} exceeds maximum (2^64-1)")


def encoded_length(value: int) -> int:
    """Return the number of bytes the encoding of value occupies (1 to 9).

    Raises:
        TypeError: If value is not an integer
        ValueError: If value is negative or exceeds 2^64-1
    """
    _check_value(value)

    if value <= ONE_BYTE_MAX:
        return 1
    if value <= TWO_BYTE_MAX:
        return 2
    if value <= THREE_BYTE_MAX:
        return 3

    # Tiers 4-9 hold 3..8 payload bytes, the smallest that fit the value
    return max(3, (value.bit_length() + 7) // 8) + 1


def decoded_length(tag: int) -> int:
    """Return the total encoded length declared by a tag byte.

    Args:
        tag: First byte of an encoding (0-255)

    Returns:
        Total number of bytes of the encoding, tag included (1 to 9)

    Raises:
        ValueError: If tag is not a byte value
    """
    if not 0 <= tag <= 0xFF:
        raise ValueError(f"Tag {tag} is not a byte value")

    if tag <= 0xF0:
        return 1
    if tag <= 0xF8:
        return 2
    return tag - 246


def encode(value: int) -> bytes:
    """Encode an unsigned integer as an SQLite4 varuint.

    Args:
        value: Integer in the range 0 to 2^64-1

    Returns:
        Minimal encoding of value, 1 to 9 bytes long

    Raises:
        TypeError: If value is not an integer
        ValueError: If value is negative or exceeds 2^64-1
    """
    length = encoded_length(value)

    if length == 1:
        return bytes([value])
    if length == 2:
        value -= 240
        return bytes([(value >> 8) + 241, value & 0xFF])
    if length == 3:
        value -= 2288
        return bytes([THREE_BYTE_TAG, value >> 8, value & 0xFF])

    return bytes([length + 246]) + value.to_bytes(length - 1, 'big')


def encode_into(buffer, value: int, offset: int = 0) -> int:
    """Encode value into a caller-owned buffer.

    Only buffer[offset:offset + n] is written, where n is the returned count.

    Args:
        buffer: Mutable bytes-like object (bytearray, writable memoryview)
        value: Integer in the range 0 to 2^64-1
        offset: Position in buffer at which the tag byte is written

    Returns:
        Number of bytes written (1 to 9)

    Raises:
        TypeError: If value is not an integer
        ValueError: If value is out of range or the buffer is too small
    """
    encoded = encode(value)
    length = len(encoded)

    if offset < 0 or offset + length > len(buffer):
        raise ValueError(
            f"Buffer too small: need {length} bytes at offset {offset}, have {max(len(buffer) - offset, 0)}")

    buffer[offset:offset + length] = encoded
    return length


def decode(data, offset: int = 0) -> tuple[int, int]:
    """Decode an SQLite4 varuint from bytes.

    The length is taken from the tag byte before any payload byte is read, and
    nothing past the end of data is ever accessed.

    Args:
        data: Bytes-like object containing the encoding
        offset: Position of the tag byte in data

    Returns:
        Tuple of (decoded_value, bytes_consumed)

    Raises:
        MalformedInputError: If data holds no tag at offset, or fewer bytes
            than the tag declares
    """
    available = len(data) - offset
    if offset < 0 or available <= 0:
        raise MalformedInputError(
            f"No varuint tag byte at offset {offset} (data length {len(data)})",
            offset, 0, max(available, 0))

    tag = data[offset]
    length = decoded_length(tag)
    if length > available:
        raise MalformedInputError(
            f"Truncated varuint encoding at offset {offset} (expected {length} bytes, have {available})",
            offset, length, available)

    if length == 1:
        return tag, 1
    if length == 2:
        return 240 + 256 * (tag - 241) + data[offset + 1], 2
    if length == 3:
        return 2288 + 256 * data[offset + 1] + data[offset + 2], 3

    return int.from_bytes(data[offset + 1:offset + length], 'big'), length
