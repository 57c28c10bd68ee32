"""Scoped buffers for key material."""

from typing import Union

WIPE_BYTE = ord("x")


def wipe_slice(buf: bytearray) -> None:
    """Overwrite buf in place with 'x', for clearing seed contents."""
    for i in range(len(buf)):
        buf[i] = WIPE_BYTE


class SecretBuffer:
    """
    Mutable copy of secret material that is overwritten when the scope exits.

    Usage:
        with SecretBuffer(seed) as buf:
            kp = nkeys.from_seed(buf)

    Every byte of ``buf`` is set to ``x`` on exit, whether the block returns
    normally or raises. A bytearray argument is taken over and wiped in place.
    """

    def __init__(self, secret: Union[str, bytes, bytearray]):
        if isinstance(secret, str):
            secret = secret.encode()
        self._buf = secret if isinstance(secret, bytearray) else bytearray(secret)
        self.wiped = False

    @property
    def data(self) -> bytearray:
        return self._buf

    def wipe(self) -> None:
        wipe_slice(self._buf)
        self.wiped = True

    def __len__(self) -> int:
        return len(self._buf)

    def __enter__(self) -> bytearray:
        return self._buf

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()
