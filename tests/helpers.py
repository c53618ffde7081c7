"""Shared helpers for the test modules."""


async def chunked(data: bytes, size: int = 4):
    """Async byte stream over ``data`` in ``size``-byte pieces."""
    for start in range(0, len(data), size):
        yield data[start:start + size]


async def collect(stream) -> bytes:
    return b"".join([chunk async for chunk in stream])
