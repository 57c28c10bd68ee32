"""
NKey authentication for eventd connections.

The server sends a nonce on connect; the client answers with its public user
key and the nonce signed by the matching seed. Seeds are never kept as key
pairs: every signature re-derives the key pair from a scoped buffer and wipes
both afterwards.
"""

import base64
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

import nkeys
from pydantic import SecretStr

from .errors import EventdNkeyError
from .secret import SecretBuffer

ETC_DIR = "etc"

# Plain seed, or the seed line inside a decorated credentials file
_SEED_LINE = re.compile(rb"^\s*(S[A-Z2-7]+)\s*$", re.MULTILINE)


@dataclass(frozen=True)
class NkeyAuth:
    """Public user key plus the callback that signs server nonces."""

    public_key: str
    signature_cb: Callable[[str], bytes]


def normalize_path(path: str, cwd: Optional[str] = None) -> str:
    """Absolute paths are kept, relative ones resolve under <cwd>/etc."""
    if os.path.isabs(path):
        return path
    base = Path(cwd) if cwd else Path.cwd()
    return str((base / ETC_DIR / path).absolute())


def _seed_buffer(contents: bytearray) -> SecretBuffer:
    match = _SEED_LINE.search(contents)
    if match is None:
        raise EventdNkeyError("no nkey seed found")
    start, end = match.span(1)
    return SecretBuffer(contents[start:end])


def _user_public_key(contents: bytearray) -> str:
    with _seed_buffer(contents) as seed:
        try:
            kp = nkeys.from_seed(seed)
        except Exception as e:
            raise EventdNkeyError(f"unable to extract key pair from nkey seed: {e}") from e
        try:
            public_key = kp.public_key.decode()
        finally:
            kp.wipe()

    if not public_key.startswith("U"):
        raise EventdNkeyError("not a valid nkey user seed")
    return public_key


def _sign(contents: bytearray, nonce: str) -> bytes:
    with _seed_buffer(contents) as seed:
        kp = nkeys.from_seed(seed)
        try:
            raw_signed = kp.sign(nonce.encode())
        finally:
            kp.wipe()
    return base64.b64encode(raw_signed)


def _read_seed_file(path: str) -> SecretBuffer:
    with open(path, "rb") as f:
        contents = bytearray(os.fstat(f.fileno()).st_size)
        f.readinto(contents)
    return SecretBuffer(contents)


def nkey_option_from_value(nkey: Union[str, SecretStr]) -> NkeyAuth:
    """
    Build nkey authentication from a raw (optionally decorated) seed value.

    Raises EventdNkeyError if the value is empty, cannot be parsed, or is not
    a user seed. The buffer holding the seed is wiped before returning.
    """
    secret = nkey if isinstance(nkey, SecretStr) else SecretStr(nkey)
    if not secret.get_secret_value():
        raise EventdNkeyError("nkey value must not be empty")

    with SecretBuffer(secret.get_secret_value()) as contents:
        public_key = _user_public_key(contents)

    def sig_cb(nonce: str) -> bytes:
        # Do not keep the private seed in memory between challenges
        with SecretBuffer(secret.get_secret_value()) as contents:
            return _sign(contents, nonce)

    return NkeyAuth(public_key=public_key, signature_cb=sig_cb)


def nkey_option_from_seed_file(path: str) -> NkeyAuth:
    """
    Build nkey authentication from a seed file.

    The file is read again for every nonce so the seed only lives in memory
    while signing. Raises EventdNkeyError if the file is missing or invalid.
    """
    try:
        buf = _read_seed_file(path)
    except OSError as e:
        raise EventdNkeyError(f"unable to read nkey seed file {path}: {e}") from e

    with buf as contents:
        public_key = _user_public_key(contents)

    def sig_cb(nonce: str) -> bytes:
        try:
            buf = _read_seed_file(path)
        except OSError as e:
            raise EventdNkeyError(f"unable to read nkey seed file {path}: {e}") from e
        with buf as contents:
            return _sign(contents, nonce)

    return NkeyAuth(public_key=public_key, signature_cb=sig_cb)
