"""Payload encryption for Viera TVs that require an encrypted session.

Newer firmware only accepts commands wrapped in ``X_EncryptedCommand``. The
payload is AES-128-CBC encrypted and signed with HMAC-SHA256; keys are
derived from the base64 encryption key handed out at pairing time (or from
the on-screen PIN challenge while pairing).
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
from dataclasses import dataclass

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes

from .exceptions import AuthenticationFailed, ProtocolError

_LOGGER = logging.getLogger(__name__)

BLOCK_SIZE = 16
HEADER_RANDOM_SIZE = 12
SIGNATURE_SIZE = 32

HMAC_KEY_MASK = bytes(
    [
        0x15, 0xC9, 0x5A, 0xC2, 0xB0, 0x8A, 0xA7, 0xEB,
        0x4E, 0x22, 0x8F, 0x81, 0x1E, 0x34, 0xD0, 0x4F,
        0xA5, 0x4B, 0xA7, 0xDC, 0xAC, 0x98, 0x79, 0xFA,
        0x8A, 0xCD, 0xA3, 0xFC, 0x24, 0x4F, 0x38, 0x54,
    ]
)


@dataclass(frozen=True)
class SessionKeys:
    """AES key, IV and HMAC key for one encryption context."""

    key: bytes
    iv: bytes
    hmac_key: bytes


def _decode_iv(value: str) -> bytes:
    try:
        iv = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as err:
        raise AuthenticationFailed("Encryption key is not valid base64") from err
    if len(iv) != BLOCK_SIZE:
        raise AuthenticationFailed(f"Encryption key must decode to {BLOCK_SIZE} bytes, got {len(iv)}")
    return iv


def _derive_hmac_key(iv: bytes) -> bytes:
    hmac_key = bytearray(2 * BLOCK_SIZE)
    for i in range(0, len(hmac_key), 4):
        hmac_key[i] = HMAC_KEY_MASK[i] ^ iv[(i + 2) & 0xF]
        hmac_key[i + 1] = HMAC_KEY_MASK[i + 1] ^ iv[(i + 3) & 0xF]
        hmac_key[i + 2] = HMAC_KEY_MASK[i + 2] ^ iv[i & 0xF]
        hmac_key[i + 3] = HMAC_KEY_MASK[i + 3] ^ iv[(i + 1) & 0xF]
    return bytes(hmac_key)


def derive_session_keys(encryption_key: str) -> SessionKeys:
    """Derive the session encryption context from a paired encryption key."""
    iv = _decode_iv(encryption_key)
    key = bytearray(BLOCK_SIZE)
    for i in range(0, BLOCK_SIZE, 4):
        key[i] = iv[i + 2]
        key[i + 1] = iv[i + 3]
        key[i + 2] = iv[i]
        key[i + 3] = iv[i + 1]
    return SessionKeys(bytes(key), iv, _derive_hmac_key(iv))


def derive_pairing_keys(challenge: str) -> SessionKeys:
    """Derive the one-off keys used to send the PIN code during pairing."""
    iv = _decode_iv(challenge)
    key = bytearray(BLOCK_SIZE)
    for i in range(0, BLOCK_SIZE, 4):
        key[i] = ~iv[i + 3] & 0xFF
        key[i + 1] = ~iv[i + 2] & 0xFF
        key[i + 2] = ~iv[i + 1] & 0xFF
        key[i + 3] = ~iv[i] & 0xFF
    return SessionKeys(bytes(key), iv, _derive_hmac_key(iv))


def _sign(data: bytes, keys: SessionKeys) -> bytes:
    return hmac.new(keys.hmac_key, data, hashlib.sha256).digest()


def encrypt_payload(text: str, keys: SessionKeys) -> str:
    """Encrypt and sign text, returning base64 suitable for X_EncInfo."""
    data = text.encode("utf-8")
    payload = get_random_bytes(HEADER_RANDOM_SIZE) + len(data).to_bytes(4, "big") + data
    if len(payload) % BLOCK_SIZE:
        payload += bytes(BLOCK_SIZE - len(payload) % BLOCK_SIZE)

    ciphertext = AES.new(keys.key, AES.MODE_CBC, keys.iv).encrypt(payload)
    return base64.b64encode(ciphertext + _sign(ciphertext, keys)).decode("ascii")


def decrypt_payload(value: str, keys: SessionKeys) -> str:
    """Decrypt a base64 X_EncResult / X_AuthResult back into XML text."""
    try:
        raw = base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError) as err:
        raise ProtocolError("Encrypted payload is not valid base64") from err

    # The signature is optional on responses; strip it only when it verifies.
    if len(raw) > SIGNATURE_SIZE:
        ciphertext, signature = raw[:-SIGNATURE_SIZE], raw[-SIGNATURE_SIZE:]
        if hmac.compare_digest(_sign(ciphertext, keys), signature):
            raw = ciphertext

    if not raw or len(raw) % BLOCK_SIZE:
        raise ProtocolError(f"Encrypted payload has invalid length {len(raw)}")

    plain = AES.new(keys.key, AES.MODE_CBC, keys.iv).decrypt(raw)
    length = int.from_bytes(plain[HEADER_RANDOM_SIZE:BLOCK_SIZE], "big")
    if BLOCK_SIZE + length > len(plain):
        _LOGGER.debug("Decrypted length header %s exceeds payload size %s", length, len(plain))
        raise ProtocolError("Encrypted payload could not be decrypted")

    try:
        return plain[BLOCK_SIZE:BLOCK_SIZE + length].decode("utf-8")
    except UnicodeDecodeError as err:
        raise ProtocolError("Encrypted payload could not be decrypted") from err
