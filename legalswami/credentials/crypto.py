"""
Credential validation and symmetric decryption.

Configured credentials arrive either in plain form (``gsk_...``) or as a
base64 string produced by :func:`encrypt_credential`. Encrypted values use
AES-128 in ECB mode with PKCS7 padding; the key is the first 16 bytes of the
UTF-8 encoded secret, zero-padded when the secret is shorter.

A value that is valid base64 but does not decrypt is given one more chance
as plain base64 of a credential before it is rejected.
"""

import base64
import binascii
import re

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from legalswami.exceptions import CredentialResolutionError

CREDENTIAL_PREFIX = "gsk_"
MIN_CREDENTIAL_LENGTH = 40

_CREDENTIAL_PATTERN = re.compile(r"^gsk_[a-zA-Z0-9]+$")
_BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")
_AES_KEY_BYTES = 16
_AES_BLOCK_BITS = 128


def mask_secret(value: str | None, visible: int = 8) -> str:
    """Return only the leading characters of a secret, for log lines and status output."""
    if not value:
        return ""
    return value[: min(visible, len(value))] + "..."


def is_valid_credential(value: str | None) -> bool:
    """Check that a value matches the provider's credential format."""
    return (
        value is not None
        and len(value) >= MIN_CREDENTIAL_LENGTH
        and value.startswith(CREDENTIAL_PREFIX)
        and _CREDENTIAL_PATTERN.match(value) is not None
    )


def _b64decode(value: str) -> bytes:
    # Accepts unpadded input
    return base64.b64decode(value + "=" * (-len(value) % 4), validate=True)


def is_probably_encrypted(value: str) -> bool:
    """
    Guess whether a raw configured value is encrypted rather than plain.

    Long values carrying the credential prefix are treated as plain. Anything
    else that is well-formed base64 is assumed to be encrypted.
    """
    if value.startswith(CREDENTIAL_PREFIX) and len(value) > MIN_CREDENTIAL_LENGTH:
        return False

    if not _BASE64_PATTERN.match(value):
        return False

    try:
        _b64decode(value)
    except (binascii.Error, ValueError):
        return False
    return True


def _aes_key(secret: str) -> bytes:
    return secret.encode("utf-8")[:_AES_KEY_BYTES].ljust(_AES_KEY_BYTES, b"\0")


def encrypt_credential(plain: str, secret: str) -> str:
    """Encrypt a plain credential into the base64 form accepted by :func:`decrypt_credential`."""
    padder = padding.PKCS7(_AES_BLOCK_BITS).padder()
    padded = padder.update(plain.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(_aes_key(secret)), modes.ECB()).encryptor()
    encrypted = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(encrypted).decode("ascii")


def decrypt_credential(encrypted: str, secret: str) -> str:
    """
    Decrypt a base64 AES credential.

    Falls back to returning the value unchanged when it already looks like a
    credential, then to a plain base64 decode.

    Raises:
        CredentialResolutionError: If none of the strategies yields text
    """
    try:
        raw = _b64decode(encrypted)
    except (binascii.Error, ValueError) as e:
        raise CredentialResolutionError(f"Failed to decrypt API key: {e}") from e

    try:
        decryptor = Cipher(algorithms.AES(_aes_key(secret)), modes.ECB()).decryptor()
        padded = decryptor.update(raw) + decryptor.finalize()
        unpadder = padding.PKCS7(_AES_BLOCK_BITS).unpadder()
        return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
    except (ValueError, UnicodeDecodeError) as aes_error:
        if encrypted.startswith(CREDENTIAL_PREFIX) and len(encrypted) > 30:
            return encrypted

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            raise CredentialResolutionError("Failed to decrypt API key") from aes_error


def resolve_credential(raw_value: str, secret: str) -> str:
    """
    Turn one configured raw value into a usable credential.

    Args:
        raw_value: Plain or encrypted credential as found in configuration
        secret: Symmetric secret used for encrypted values

    Returns:
        str: The plain credential

    Raises:
        CredentialResolutionError: If the value cannot be decrypted or does not
            match the credential format once resolved
    """
    value = raw_value.strip()
    if not value:
        raise CredentialResolutionError("Empty API key")

    resolved = decrypt_credential(value, secret) if is_probably_encrypted(value) else value

    if not is_valid_credential(resolved):
        raise CredentialResolutionError(f"Invalid API key format: {mask_secret(resolved, 10)}")
    return resolved
