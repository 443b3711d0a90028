import secrets
import struct


def generate_jid() -> str:
    """Return a random job id made of two unsigned 32-bit decimal parts."""
    part1, part2 = struct.unpack(">II", secrets.token_bytes(8))
    return f"{part1}{part2}"
