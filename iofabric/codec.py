"""
Binary frame codec for the ioFabric socket protocol.

Every frame starts with a one-byte opcode. Multi-byte integers are
big-endian and unsigned. This module is pure: no I/O, no state.
"""

from iofabric.errors import DecodeError, EncodingError
from iofabric.models import Frame, Opcode, Receipt

LENGTH_PREFIX_SIZE = 4
MAX_MESSAGE_SIZE = 2 ** (8 * LENGTH_PREFIX_SIZE) - 1

INBOUND_OPCODES = frozenset(
    {Opcode.PING, Opcode.CONTROL_SIGNAL, Opcode.MESSAGE, Opcode.RECEIPT}
)


def encode_message_frame(data: bytes) -> bytes:
    """Wrap encoded entity bytes as ``[MESSAGE][u32 length][data]``."""
    if len(data) > MAX_MESSAGE_SIZE:
        raise EncodingError(
            f"Message of {len(data)} bytes exceeds the {MAX_MESSAGE_SIZE} byte frame limit"
        )
    return bytes([Opcode.MESSAGE]) + len(data).to_bytes(LENGTH_PREFIX_SIZE, "big") + data


def encode_ack() -> bytes:
    return bytes([Opcode.ACK])


def encode_pong(payload: bytes = b"") -> bytes:
    return bytes([Opcode.PONG]) + payload


def decode_inbound(data: bytes) -> Frame | None:
    """
    Decode one inbound frame.

    Returns None for an empty buffer or an opcode the client does not
    receive; callers drop those silently.

    Raises:
        DecodeError: If a MESSAGE or RECEIPT frame is truncated
    """
    if not data or data[0] not in INBOUND_OPCODES:
        return None

    opcode = Opcode(data[0])
    if opcode == Opcode.MESSAGE:
        return Frame(opcode=opcode, payload=decode_message_payload(data))
    if opcode == Opcode.RECEIPT:
        receipt = decode_receipt(data[1:])
        return Frame(opcode=opcode, payload=bytes(data[1 : 3 + data[1] + data[2]]), receipt=receipt)
    if opcode == Opcode.PING:
        return Frame(opcode=opcode, payload=bytes(data[1:]))
    return Frame(opcode=opcode)


def decode_message_payload(data: bytes) -> bytes:
    start = 1 + LENGTH_PREFIX_SIZE
    if len(data) < start:
        raise DecodeError(f"MESSAGE frame too short for length prefix ({len(data)} bytes)")

    length = int.from_bytes(data[1:start], "big")
    end = start + length
    if len(data) < end:
        raise DecodeError(f"MESSAGE frame announces {length} bytes, has {len(data) - start}")

    # A frame carries one envelope; anything past it is ignored.
    return bytes(data[start:end])


def decode_receipt(payload: bytes) -> Receipt:
    """Decode ``[idLen][tsLen][id utf-8][timestamp]`` into a Receipt."""
    if len(payload) < 2:
        raise DecodeError(f"RECEIPT frame too short for its header ({len(payload)} bytes)")

    id_length, timestamp_length = payload[0], payload[1]
    end = 2 + id_length + timestamp_length
    if len(payload) < end:
        raise DecodeError(f"RECEIPT frame needs {end} bytes, has {len(payload)}")

    pos = 2
    message_id = ""
    if id_length:
        try:
            message_id = bytes(payload[pos : pos + id_length]).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"RECEIPT id is not valid UTF-8: {exc}") from exc
        pos += id_length

    timestamp = 0
    if timestamp_length:
        timestamp = int.from_bytes(payload[pos : pos + timestamp_length], "big")

    return Receipt(id=message_id, timestamp=timestamp)
