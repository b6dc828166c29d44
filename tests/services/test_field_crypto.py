import pytest

from nexusbootstrap.errors import ConfigurationError, DecryptFailure
from nexusbootstrap.models import DEFAULT_ENCRYPTION_IV, DEFAULT_ENCRYPTION_KEY
from nexusbootstrap.services.ciphertext import is_ciphertext
from nexusbootstrap.services.field_crypto import AesCipher, FieldCrypto


class RecordingLogger:
    def __init__(self):
        self.warnings = []

    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, message, *args, **_kwargs):
        self.warnings.append(message % args)


def _cipher():
    return AesCipher.from_hex(DEFAULT_ENCRYPTION_KEY, DEFAULT_ENCRYPTION_IV)


def test_cipher_output_is_hex_ciphertext_and_decrypts_back():
    cipher = _cipher()

    encrypted = cipher.encrypt("sandbox-secret")

    assert is_ciphertext(encrypted)
    assert len(encrypted) == 32
    assert cipher.decrypt(encrypted) == "sandbox-secret"


def test_cipher_rejects_wrong_key_length():
    with pytest.raises(ConfigurationError):
        AesCipher.from_hex("abcd", DEFAULT_ENCRYPTION_IV)


def test_cipher_rejects_non_hex_key_material():
    with pytest.raises(ConfigurationError):
        AesCipher.from_hex("z" * 64, DEFAULT_ENCRYPTION_IV)


def test_decrypt_of_partial_block_raises_decrypt_failure():
    with pytest.raises(DecryptFailure):
        _cipher().decrypt("00" * 20)


def test_encrypt_fields_skips_empty_absent_and_already_encrypted_values():
    crypto = FieldCrypto(_cipher(), RecordingLogger())
    already = _cipher().encrypt("existing")
    record = {"api_key": "plain-key", "secret_key": already, "name": "Primary", "empty": ""}

    encrypted = crypto.encrypt_fields(record, ["api_key", "secret_key", "missing", "empty"])

    assert encrypted["api_key"] != "plain-key"
    assert is_ciphertext(encrypted["api_key"])
    assert encrypted["secret_key"] == already
    assert encrypted["name"] == "Primary"
    assert encrypted["empty"] == ""
    assert "missing" not in encrypted
    assert record["api_key"] == "plain-key"


def test_encrypt_fields_is_idempotent():
    crypto = FieldCrypto(_cipher(), RecordingLogger())
    record = {"api_key": "plain-key", "secret_key": "plain-secret"}

    once = crypto.encrypt_fields(record, ["api_key", "secret_key"])
    twice = crypto.encrypt_fields(once, ["api_key", "secret_key"])

    assert twice == once


def test_decrypt_fields_restores_plaintext_record():
    crypto = FieldCrypto(_cipher(), RecordingLogger())
    record = {"api_key": "plain-key", "secret_key": "plain-secret", "currency": "TRY"}

    restored = crypto.decrypt_fields(crypto.encrypt_fields(record, ["api_key", "secret_key"]), ["api_key", "secret_key"])

    assert restored == record


def test_decrypt_fields_leaves_legacy_plaintext_untouched():
    crypto = FieldCrypto(_cipher(), RecordingLogger())

    decrypted = crypto.decrypt_fields({"api_key": "legacy-key"}, ["api_key"])

    assert decrypted["api_key"] == "legacy-key"


def test_decrypt_fields_keeps_stored_value_and_continues_on_failure():
    logger = RecordingLogger()
    crypto = FieldCrypto(_cipher(), logger)
    undecryptable = "a" * 33
    record = {"api_key": undecryptable, "secret_key": _cipher().encrypt("secret")}

    decrypted = crypto.decrypt_fields(record, ["api_key", "secret_key"])

    assert decrypted["api_key"] == undecryptable
    assert decrypted["secret_key"] == "secret"
    assert len(logger.warnings) == 1
    assert "api_key" in logger.warnings[0]


def test_has_encrypted_fields():
    crypto = FieldCrypto(_cipher(), RecordingLogger())

    assert crypto.has_encrypted_fields({"api_key": "a" * 32}, ["api_key"]) is True
    assert crypto.has_encrypted_fields({"api_key": "plain"}, ["api_key", "secret_key"]) is False
