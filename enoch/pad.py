"""One time pad generation, encryption and decryption over binary streams."""

from __future__ import annotations

import os
from typing import BinaryIO, Iterable

DEFAULT_DEVICES = ("/dev/TrueRNG", "/dev/random")

ERR_DEF_DEV = "Default RNG devices not operating"
ERR_WRITE_OTP = "Error writing OTP file"
ERR_WRITE_PDOTP = "Error writing PD OTP file"
ERR_READ_STAT = "Error reading encrypted file statistics"
ERR_OTP_STAT = "Error reading OTP file statistics"
ERR_GET_DEV = "Error reading RNG device"
ERR_ENC_SHORT = "Encrypted file is too short"
ERR_ENC_SIZE = "Size specified is larger than input encrypted file"
ERR_OTP_SIZE = "Size specified is larger than OTP file"
ERR_READ_INPUT = "Error reading input clear file"
ERR_WRITE_ENC = "Error writing encrypted file"
ERR_OTP_SHORT = "Warning - OTP file is short for input encrypted file"
ERR_WRITE_DEC = "Error writing decrypted file"

_CHUNK = 65536


class PadError(Exception):
    """Raised when a pad operation cannot complete."""


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    parts = []
    remaining = size
    while remaining > 0:
        data = stream.read(remaining)
        if not data:
            break
        parts.append(data)
        remaining -= len(data)
    return b"".join(parts)


def _write(stream: BinaryIO, data: bytes, message: str) -> None:
    try:
        stream.write(data)
    except OSError as exc:
        raise PadError(message) from exc


def _xor(left: bytes, right: bytes) -> bytes:
    return bytes(a ^ b for a, b in zip(left, right))


def _xor_streams(
    source: BinaryIO,
    key: BinaryIO,
    output: BinaryIO,
    *,
    limit: int | None,
    short_message: str,
    write_message: str,
) -> int:
    """XOR ``source`` with ``key`` into ``output``; return the bytes done."""
    total = 0
    while limit is None or total < limit:
        want = _CHUNK if limit is None else min(_CHUNK, limit - total)
        data = source.read(want)
        if not data:
            break
        pad = _read_exact(key, len(data))
        if pad:
            _write(output, _xor(data, pad), write_message)
        total += len(pad)
        if len(pad) < len(data):
            raise PadError(short_message)
    return total


def open_default_device(candidates: Iterable[str] = DEFAULT_DEVICES) -> tuple[str, BinaryIO]:
    """Open the first readable random device; return its path and stream."""
    for path in candidates:
        try:
            return path, open(path, "rb", buffering=0)
        except OSError:
            continue
    raise PadError(ERR_DEF_DEV)


def generate(device: BinaryIO, otp: BinaryIO, size: int) -> None:
    """Write ``size`` random bytes from ``device`` to ``otp``."""
    remaining = size
    while remaining > 0:
        data = _read_exact(device, min(_CHUNK, remaining))
        if data:
            _write(otp, data, ERR_WRITE_OTP)
        remaining -= len(data)
        if remaining > 0 and len(data) < min(_CHUNK, remaining + len(data)):
            raise PadError(ERR_GET_DEV)


def generate_deniable(
    clear: BinaryIO,
    encrypted: BinaryIO,
    otp: BinaryIO,
    device: BinaryIO | None = None,
    encrypted_size: int | None = None,
    fill: bool = False,
) -> None:
    """Write a pad that turns ``encrypted`` into ``clear`` when decrypting.

    With ``fill`` the pad is extended with random bytes from ``device`` up to
    the size of the encrypted file, taken from ``encrypted_size`` or, when
    that is None, from the encrypted stream's file.
    """
    count = _xor_streams(
        clear,
        encrypted,
        otp,
        limit=None,
        short_message=ERR_ENC_SHORT,
        write_message=ERR_WRITE_PDOTP,
    )
    if count == 0:
        raise PadError(ERR_READ_INPUT)
    if not fill:
        return

    if encrypted_size is None:
        try:
            encrypted_size = os.fstat(encrypted.fileno()).st_size
        except (OSError, AttributeError, ValueError) as exc:
            raise PadError(ERR_READ_STAT) from exc
    if device is None:
        raise PadError(ERR_GET_DEV)

    remaining = encrypted_size - count
    while remaining > 0:
        data = _read_exact(device, min(_CHUNK, remaining))
        if not data:
            break
        _write(otp, data, ERR_WRITE_OTP)
        remaining -= len(data)


def encrypt(clear: BinaryIO, otp: BinaryIO, output: BinaryIO) -> None:
    """Encrypt ``clear`` with an existing pad into ``output``."""
    count = _xor_streams(
        clear,
        otp,
        output,
        limit=None,
        short_message=ERR_OTP_SHORT,
        write_message=ERR_WRITE_ENC,
    )
    if count == 0:
        raise PadError(ERR_READ_INPUT)


def encrypt_new_pad(clear: BinaryIO, device: BinaryIO, otp: BinaryIO, output: BinaryIO) -> None:
    """Encrypt ``clear`` with fresh random bytes, saving them as the pad."""
    for data in iter(lambda: clear.read(_CHUNK), b""):
        pad = _read_exact(device, len(data))
        if pad:
            _write(otp, pad, ERR_WRITE_OTP)
            _write(output, _xor(data, pad), ERR_WRITE_ENC)
        if len(pad) < len(data):
            raise PadError(ERR_GET_DEV)


def check_decrypt_size(size: int, encrypted_path: str | os.PathLike, otp_path: str | os.PathLike) -> None:
    """Check that a decryption size limit fits both files."""
    if size <= 0:
        return
    try:
        encrypted_size = os.stat(encrypted_path).st_size
    except OSError as exc:
        raise PadError(ERR_READ_STAT) from exc
    if size > encrypted_size:
        raise PadError(ERR_ENC_SIZE)
    try:
        otp_size = os.stat(otp_path).st_size
    except OSError as exc:
        raise PadError(ERR_OTP_STAT) from exc
    if size > otp_size:
        raise PadError(ERR_OTP_SIZE)


def decrypt(encrypted: BinaryIO, otp: BinaryIO, output: BinaryIO, size: int = 0) -> None:
    """Decrypt ``encrypted`` with ``otp``; a positive ``size`` limits the bytes."""
    first = encrypted.read(1)
    if not first:
        raise PadError(ERR_READ_INPUT)
    pad = otp.read(1)
    if not pad:
        raise PadError(ERR_OTP_SHORT)
    _write(output, _xor(first, pad), ERR_WRITE_DEC)
    if size > 0:
        if size <= 1:
            return
        limit = size - 1
    else:
        limit = None
    _xor_streams(
        encrypted,
        otp,
        output,
        limit=limit,
        short_message=ERR_OTP_SHORT,
        write_message=ERR_WRITE_DEC,
    )