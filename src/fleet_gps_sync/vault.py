# fleet_gps_sync/vault.py
"""
Credential vault: symmetric encryption of provider credential blobs.

Each provider stores its vendor credentials as a JSON object that is
encrypted before it reaches the database. The stored value is text:

    <iv hex>:<ciphertext hex>:<tag hex>

- AES-256-CBC with PKCS7 padding and a fresh random 16-byte IV per value.
- The tag is an HMAC-SHA256 over IV and ciphertext, so tampering is
  detected before decryption is attempted.
- Values written by earlier deployments carry no tag (`<iv>:<ciphertext>`);
  they are still accepted and checked through padding, UTF-8 and JSON
  validation instead.

The server-held key comes from configuration. Keys longer than 32 bytes are
truncated and shorter ones padded with '0' so existing ciphertexts keep
decrypting with the same operator key.

Any failure to decrypt or parse raises CredentialError. Decrypted values
are never logged.
"""

import hashlib
import json
import logging
import os
from typing import Any, Final

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from fleet_gps_sync.config import VaultConfig

__all__: list[str] = ['CredentialError', 'CredentialVault']

logger: logging.Logger = logging.getLogger(__name__)

AES_KEY_BYTES: Final[int] = 32
AES_BLOCK_BITS: Final[int] = 128
IV_BYTES: Final[int] = 16
FIELD_SEPARATOR: Final[str] = ':'
KEY_PAD_CHARACTER: Final[str] = '0'


class CredentialError(Exception):
    """
    Raised when stored credentials cannot be decrypted or parsed.

    Covers malformed ciphertext, a failed integrity check, wrong key,
    invalid padding, non-UTF-8 plaintext and plaintext that is not a JSON
    object. Aborts the sync for one provider only.
    """

    pass


def _normalize_key(raw_key: str) -> bytes:
    """Pad or truncate the operator key to exactly 32 bytes."""
    key_bytes: bytes = raw_key.encode('utf-8')
    if len(key_bytes) >= AES_KEY_BYTES:
        return key_bytes[:AES_KEY_BYTES]
    return key_bytes.ljust(AES_KEY_BYTES, KEY_PAD_CHARACTER.encode('ascii'))


def _parse_hex(value: str, name: str) -> bytes:
    text: str = value.strip()
    if not text:
        raise CredentialError(f'{name} is empty')
    try:
        return bytes.fromhex(text)
    except ValueError as error:
        raise CredentialError(f'{name} must be hex-encoded') from error


class CredentialVault:
    """
    Encrypts and decrypts provider credential blobs.

    Example:
        >>> vault = CredentialVault(config.vault)
        >>> token = vault.encrypt_credentials({'apiToken': 'abc', 'apiUrl': 'https://api.samsara.com'})
        >>> vault.decrypt_credentials(token)['apiToken']
        'abc'
    """

    def __init__(self, vault_config: VaultConfig) -> None:
        self._key: bytes = _normalize_key(vault_config.encryption_key.get_secret_value())
        # Separate MAC key so the cipher key is never reused for authentication.
        self._mac_key: bytes = hashlib.sha256(b'credential-mac:' + self._key).digest()

    # -------------------------------------------------------------------------
    # Raw text
    # -------------------------------------------------------------------------

    def encrypt(self, plaintext_json: str) -> str:
        """
        Encrypt a plaintext string.

        Args:
            plaintext_json: Serialized credential JSON.

        Returns:
            "<iv>:<ciphertext>:<tag>" in lowercase hex.
        """
        iv: bytes = os.urandom(IV_BYTES)

        padder = padding.PKCS7(AES_BLOCK_BITS).padder()
        padded: bytes = padder.update(plaintext_json.encode('utf-8')) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext: bytes = encryptor.update(padded) + encryptor.finalize()

        tag: bytes = self._sign(iv, ciphertext)
        return FIELD_SEPARATOR.join((iv.hex(), ciphertext.hex(), tag.hex()))

    def decrypt(self, ciphertext: str) -> str:
        """
        Decrypt a value produced by `encrypt`.

        Args:
            ciphertext: Stored vault value.

        Returns:
            The original plaintext string.

        Raises:
            CredentialError: On malformed input, failed integrity check, or
                any decryption failure.
        """
        if not ciphertext:
            raise CredentialError('Encrypted credentials are empty')

        parts: list[str] = ciphertext.split(FIELD_SEPARATOR)
        match parts:
            case [iv_hex, body_hex, tag_hex]:
                iv: bytes = _parse_hex(iv_hex, 'IV')
                body: bytes = _parse_hex(body_hex, 'ciphertext')
                self._verify(iv, body, _parse_hex(tag_hex, 'tag'))
            case [iv_hex, body_hex]:
                iv = _parse_hex(iv_hex, 'IV')
                body = _parse_hex(body_hex, 'ciphertext')
            case _:
                raise CredentialError('Invalid encrypted data format')

        if len(iv) != IV_BYTES:
            raise CredentialError(f'IV must be {IV_BYTES} bytes, got {len(iv)}')
        if len(body) % (AES_BLOCK_BITS // 8) != 0:
            raise CredentialError('Ciphertext length is not a multiple of the block size')

        try:
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded: bytes = decryptor.update(body) + decryptor.finalize()
            unpadder = padding.PKCS7(AES_BLOCK_BITS).unpadder()
            plaintext: bytes = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode('utf-8')
        except (ValueError, UnicodeDecodeError) as error:
            raise CredentialError('Failed to decrypt credentials') from error

    # -------------------------------------------------------------------------
    # Credential dicts
    # -------------------------------------------------------------------------

    def encrypt_credentials(self, credentials: dict[str, Any]) -> str:
        """Serialize a credential mapping to JSON and encrypt it."""
        return self.encrypt(json.dumps(credentials, separators=(',', ':')))

    def decrypt_credentials(self, ciphertext: str) -> dict[str, Any]:
        """
        Decrypt and parse a stored credential blob.

        Raises:
            CredentialError: If decryption fails or the plaintext is not a
                JSON object.
        """
        plaintext: str = self.decrypt(ciphertext)
        try:
            parsed: Any = json.loads(plaintext)
        except json.JSONDecodeError as error:
            raise CredentialError('Decrypted credentials are not valid JSON') from error

        if not isinstance(parsed, dict):
            raise CredentialError(
                f'Decrypted credentials must be a JSON object, got {type(parsed).__name__}'
            )
        return parsed

    # -------------------------------------------------------------------------
    # Integrity
    # -------------------------------------------------------------------------

    def _sign(self, iv: bytes, body: bytes) -> bytes:
        mac = hmac.HMAC(self._mac_key, hashes.SHA256())
        mac.update(iv)
        mac.update(body)
        return mac.finalize()

    def _verify(self, iv: bytes, body: bytes, tag: bytes) -> None:
        mac = hmac.HMAC(self._mac_key, hashes.SHA256())
        mac.update(iv)
        mac.update(body)
        try:
            mac.verify(tag)
        except InvalidSignature as error:
            logger.warning('Credential blob failed integrity check')
            raise CredentialError('Encrypted credentials failed integrity check') from error
