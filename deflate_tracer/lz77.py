from deflate_tracer.errors import InvalidBackReference


def resolve_back_reference(length: int, distance: int, output: bytes | bytearray) -> bytes:
    """Bytes produced by copying ``length`` bytes from ``distance`` bytes back.

    When ``length > distance`` the copy runs into the bytes it is producing, so
    the last ``distance`` bytes repeat (``"ab"`` with distance 2, length 5 gives
    ``"ababa"``).
    """
    if distance < 1 or distance > len(output):
        raise InvalidBackReference(
            f"distance {distance} reaches before the start of the output ({len(output)} bytes so far)")
    if length < 1:
        raise InvalidBackReference(f"invalid back-reference length {length}")
    start = len(output) - distance
    if length <= distance:
        return bytes(output[start:start + length])
    window = bytes(output[start:])
    reps, rest = divmod(length, distance)
    return window * reps + window[:rest]
