"""Encrypt-on-write / decrypt-on-read helpers for secret record fields."""

import binascii
import logging
from typing import Any, Dict, Iterable, Mapping

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from nexusbootstrap.errors import ConfigurationError, DecryptFailure
from nexusbootstrap.services.ciphertext import is_ciphertext


class AesCipher:
    """AES-256-CBC with fixed key and IV, hex encoded."""

    KEY_BYTES = 32
    IV_BYTES = 16

    def __init__(self, key: bytes, iv: bytes):
        if len(key) != self.KEY_BYTES:
            raise ConfigurationError(
                f"Encryption key must be {self.KEY_BYTES} bytes ({self.KEY_BYTES * 2} hex characters)."
            )
        if len(iv) != self.IV_BYTES:
            raise ConfigurationError(
                f"Encryption IV must be {self.IV_BYTES} bytes ({self.IV_BYTES * 2} hex characters)."
            )
        self._key = key
        self._iv = iv

    @classmethod
    def from_hex(cls, key_hex: str, iv_hex: str) -> "AesCipher":
        try:
            key = bytes.fromhex(key_hex.strip())
            iv = bytes.fromhex(iv_hex.strip())
        except (AttributeError, ValueError) as exc:
            raise ConfigurationError("Encryption key and IV must be hexadecimal strings.") from exc
        return cls(key, iv)

    def _cipher(self) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(self._iv))

    def encrypt(self, plaintext: str) -> str:
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = self._cipher().encryptor()
        return (encryptor.update(padded) + encryptor.finalize()).hex()

    def decrypt(self, ciphertext: str) -> str:
        try:
            raw = binascii.unhexlify(ciphertext)
            decryptor = self._cipher().decryptor()
            padded = decryptor.update(raw) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except (binascii.Error, ValueError, UnicodeDecodeError) as exc:
            raise DecryptFailure(f"Could not decrypt value: {exc}") from exc


class FieldCrypto:
    """Applies the cipher to a named subset of fields on a record."""

    def __init__(self, cipher: AesCipher, logger: logging.Logger):
        self.cipher = cipher
        self.logger = logger

    def encrypt_fields(self, record: Mapping[str, Any], field_names: Iterable[str]) -> Dict[str, Any]:
        encrypted = dict(record)
        for name in field_names:
            value = encrypted.get(name)
            if not value or not isinstance(value, str):
                continue
            if is_ciphertext(value):
                self.logger.debug("Field %s already holds ciphertext; leaving unchanged.", name)
                continue
            encrypted[name] = self.cipher.encrypt(value)
        return encrypted

    def decrypt_fields(self, record: Mapping[str, Any], field_names: Iterable[str]) -> Dict[str, Any]:
        decrypted = dict(record)
        for name in field_names:
            value = decrypted.get(name)
            if not is_ciphertext(value):
                continue
            try:
                decrypted[name] = self.cipher.decrypt(value)
            except DecryptFailure as exc:
                self.logger.warning(
                    "Could not decrypt field '%s'; returning stored value unchanged. %s",
                    name,
                    exc,
                )
        return decrypted

    def has_encrypted_fields(self, record: Mapping[str, Any], field_names: Iterable[str]) -> bool:
        return any(is_ciphertext(record.get(name)) for name in field_names)
