import pytest

from nexusbootstrap.errors import NotFound, ValidationError
from nexusbootstrap.models import DEFAULT_ENCRYPTION_IV, DEFAULT_ENCRYPTION_KEY
from nexusbootstrap.services.ciphertext import is_ciphertext
from nexusbootstrap.services.credential_store import CredentialStore
from nexusbootstrap.services.database import Database
from nexusbootstrap.services.field_crypto import AesCipher, FieldCrypto


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


@pytest.fixture
def database(tmp_path):
    return Database(str(tmp_path / "data" / "store.db"), logger=DummyLogger())


@pytest.fixture
def store(database):
    cipher = AesCipher.from_hex(DEFAULT_ENCRYPTION_KEY, DEFAULT_ENCRYPTION_IV)
    return CredentialStore(database, FieldCrypto(cipher, DummyLogger()), DummyLogger())


def _raw_rows(database):
    with database.transaction() as conn:
        return [dict(row) for row in conn.execute("SELECT * FROM payment_credentials")]


def _active_ids(database):
    return [row["id"] for row in _raw_rows(database) if row["is_active"]]


def test_create_applies_defaults_and_stores_ciphertext(store, database):
    record = store.create({"name": "Primary", "api_key": "api-key-1", "secret_key": "secret-1"})

    assert record.api_key == "api-key-1"
    assert record.secret_key == "secret-1"
    assert record.base_url == "https://sandbox-api.iyzipay.com"
    assert record.currency == "TRY"
    assert record.installment == 1
    assert record.is_test_mode is True
    assert record.is_active is True

    stored = _raw_rows(database)[0]
    assert is_ciphertext(stored["api_key"])
    assert is_ciphertext(stored["secret_key"])
    assert stored["api_key"] != "api-key-1"


def test_create_requires_name_and_secrets(store):
    with pytest.raises(ValidationError):
        store.create({"name": "Primary", "api_key": "api-key-1"})


def test_create_rejects_unknown_fields(store):
    with pytest.raises(ValidationError):
        store.create({"name": "Primary", "api_key": "a", "secret_key": "b", "merchant": "x"})


def test_create_active_deactivates_previous_records(store, database):
    first = store.create({"name": "First", "api_key": "k1", "secret_key": "s1"})
    second = store.create({"name": "Second", "api_key": "k2", "secret_key": "s2"})

    assert _active_ids(database) == [second.id]
    assert store.get_by_id(first.id).is_active is False


def test_create_inactive_keeps_existing_active_record(store, database):
    first = store.create({"name": "First", "api_key": "k1", "secret_key": "s1"})
    store.create({"name": "Backup", "api_key": "k2", "secret_key": "s2", "is_active": False})

    assert _active_ids(database) == [first.id]


def test_set_active_leaves_exactly_one_active_record(store, database):
    first = store.create({"name": "First", "api_key": "k1", "secret_key": "s1"})
    store.create({"name": "Second", "api_key": "k2", "secret_key": "s2"})

    activated = store.set_active(first.id)

    assert activated.id == first.id
    assert store.get_active().id == first.id
    assert _active_ids(database) == [first.id]


def test_set_active_unknown_id_raises_and_keeps_current_active(store, database):
    current = store.create({"name": "First", "api_key": "k1", "secret_key": "s1"})

    with pytest.raises(NotFound):
        store.set_active("missing-id")

    assert _active_ids(database) == [current.id]


def test_get_active_without_active_record_raises(store):
    store.create({"name": "Backup", "api_key": "k1", "secret_key": "s1", "is_active": False})

    with pytest.raises(NotFound) as exc_info:
        store.get_active()

    assert "Suggested action:" in str(exc_info.value)


def test_update_partial_payload_encrypts_only_given_secret(store, database):
    record = store.create({"name": "Primary", "api_key": "k1", "secret_key": "s1"})
    secret_before = _raw_rows(database)[0]["secret_key"]

    updated = store.update(record.id, {"api_key": "k1-rotated", "currency": "USD"})

    assert updated.api_key == "k1-rotated"
    assert updated.secret_key == "s1"
    assert updated.currency == "USD"
    stored = _raw_rows(database)[0]
    assert is_ciphertext(stored["api_key"])
    assert stored["secret_key"] == secret_before


def test_update_activation_deactivates_others(store, database):
    first = store.create({"name": "First", "api_key": "k1", "secret_key": "s1"})
    second = store.create({"name": "Second", "api_key": "k2", "secret_key": "s2"})

    store.update(first.id, {"is_active": True})

    assert _active_ids(database) == [first.id]
    assert store.get_by_id(second.id).is_active is False


def test_update_unknown_id_raises(store):
    with pytest.raises(NotFound):
        store.update("missing-id", {"name": "x"})


def test_update_with_blank_secret_keeps_stored_secret(store, database):
    record = store.create({"name": "Primary", "api_key": "api-key-1", "secret_key": "s1"})
    stored_before = _raw_rows(database)[0]["api_key"]

    updated = store.update(record.id, {"api_key": "", "secret_key": None, "currency": "USD"})

    assert updated.api_key == "api-key-1"
    assert updated.secret_key == "s1"
    assert updated.currency == "USD"
    assert _raw_rows(database)[0]["api_key"] == stored_before


@pytest.mark.parametrize("installment", [None, "three"])
def test_update_with_invalid_installment_raises_validation_error(store, installment):
    record = store.create({"name": "Primary", "api_key": "k1", "secret_key": "s1"})

    with pytest.raises(ValidationError):
        store.update(record.id, {"installment": installment, "currency": "USD"})

    assert store.get_by_id(record.id).currency == "TRY"


def test_create_with_invalid_installment_options_raises_validation_error(store):
    with pytest.raises(ValidationError):
        store.create(
            {"name": "Primary", "api_key": "k1", "secret_key": "s1", "installment_options": [{"minAmount": 1}]}
        )

    assert store.list() == []


def test_reads_tolerate_legacy_plaintext_rows(store, database):
    with database.transaction() as conn:
        conn.execute(
            """
            INSERT INTO payment_credentials (
                id, name, api_key, secret_key, created_at, updated_at
            ) VALUES ('legacy', 'Legacy', 'plain-key', 'plain-secret', '2024-01-01', '2024-01-01')
            """
        )

    record = store.get_by_id("legacy")

    assert record.api_key == "plain-key"
    assert record.secret_key == "plain-secret"
    assert [item.id for item in store.list()] == ["legacy"]


def test_delete_removes_record_and_unknown_id_raises(store):
    record = store.create({"name": "Primary", "api_key": "k1", "secret_key": "s1"})

    store.delete(record.id)

    assert store.list() == []
    with pytest.raises(NotFound):
        store.delete(record.id)


def test_client_config_and_installments_come_from_active_record(store):
    store.create(
        {
            "name": "Primary",
            "api_key": "k1",
            "secret_key": "s1",
            "base_url": "https://api.iyzipay.com",
            "installment_options": [
                {"count": 3, "minAmount": 100, "maxAmount": 5000},
                {"count": 6, "minAmount": 1000, "maxAmount": 20000},
            ],
        }
    )

    assert store.get_active_client_config() == {
        "api_key": "k1",
        "secret_key": "s1",
        "uri": "https://api.iyzipay.com",
    }
    assert [option.count for option in store.available_installments(500)] == [3]
    assert [option.count for option in store.available_installments(2000)] == [3, 6]
