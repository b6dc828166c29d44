"""Payment-provider credential persistence with encrypted secret fields."""

import json
import sqlite3
import uuid
from typing import Any, Dict, List, Mapping, Optional

from nexusbootstrap.errors import NotFound, ValidationError
from nexusbootstrap.errors_catalog import actionable_error
from nexusbootstrap.models import CredentialRecord, InstallmentOption, utc_now


class CredentialStore:
    """Keeps at most one active credential set and never returns ciphertext."""

    ENCRYPTED_FIELDS = ("api_key", "secret_key")
    REQUIRED_FIELDS = ("name", "api_key", "secret_key")
    WRITABLE_FIELDS = (
        "name",
        "api_key",
        "secret_key",
        "base_url",
        "installment",
        "is_test_mode",
        "currency",
        "is_active",
        "installment_options",
    )
    DEFAULTS: Dict[str, Any] = {
        "base_url": "https://sandbox-api.iyzipay.com",
        "installment": 1,
        "is_test_mode": True,
        "currency": "TRY",
        "is_active": True,
        "installment_options": [],
    }

    def __init__(self, database, field_crypto, logger):
        self.database = database
        self.field_crypto = field_crypto
        self.logger = logger

    def create(self, payload: Mapping[str, Any]) -> CredentialRecord:
        self._reject_unknown_keys(payload)
        missing = [name for name in self.REQUIRED_FIELDS if not payload.get(name)]
        if missing:
            raise ValidationError(f"Missing required credential fields: {', '.join(missing)}")

        values = dict(self.DEFAULTS)
        values.update(payload)
        values = self.field_crypto.encrypt_fields(values, self.ENCRYPTED_FIELDS)
        installment = self._to_column("installment", values["installment"])
        installment_options = self._to_column("installment_options", values["installment_options"])

        credential_id = str(uuid.uuid4())
        now = utc_now()
        with self.database.transaction() as conn:
            if values["is_active"]:
                conn.execute("UPDATE payment_credentials SET is_active = 0, updated_at = ?", (now,))
            conn.execute(
                """
                INSERT INTO payment_credentials (
                    id, name, api_key, secret_key, base_url, installment, is_test_mode,
                    currency, is_active, installment_options, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    credential_id,
                    values["name"],
                    values["api_key"],
                    values["secret_key"],
                    values["base_url"],
                    installment,
                    int(bool(values["is_test_mode"])),
                    values["currency"],
                    int(bool(values["is_active"])),
                    installment_options,
                    now,
                    now,
                ),
            )

        self.logger.info("Created payment credential '%s' (%s).", values["name"], credential_id)
        return self.get_by_id(credential_id)

    def list(self) -> List[CredentialRecord]:
        with self.database.transaction() as conn:
            rows = conn.execute("SELECT * FROM payment_credentials ORDER BY created_at, id").fetchall()
        return [self._to_record(row) for row in rows]

    def get_by_id(self, credential_id: str) -> CredentialRecord:
        with self.database.transaction() as conn:
            row = self._fetch(conn, credential_id)
        if row is None:
            raise NotFound(actionable_error("credential_not_found", credential_id=credential_id))
        return self._to_record(row)

    def get_active(self) -> CredentialRecord:
        with self.database.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM payment_credentials WHERE is_active = 1 ORDER BY updated_at DESC LIMIT 1"
            ).fetchone()
        if row is None:
            raise NotFound(actionable_error("no_active_credential"))
        return self._to_record(row)

    def update(self, credential_id: str, payload: Mapping[str, Any]) -> CredentialRecord:
        self._reject_unknown_keys(payload)
        values = self.field_crypto.encrypt_fields(payload, self.ENCRYPTED_FIELDS)
        now = utc_now()

        assignments = []
        params: List[Any] = []
        for name in self.WRITABLE_FIELDS:
            if name not in values:
                continue
            # Blank secrets mean "keep the stored value".
            if name in self.ENCRYPTED_FIELDS and not values[name]:
                continue
            assignments.append(f"{name} = ?")
            params.append(self._to_column(name, values[name]))
        assignments.append("updated_at = ?")
        params.append(now)
        params.append(credential_id)

        with self.database.transaction() as conn:
            if self._fetch(conn, credential_id) is None:
                raise NotFound(actionable_error("credential_not_found", credential_id=credential_id))

            if values.get("is_active"):
                conn.execute(
                    "UPDATE payment_credentials SET is_active = 0, updated_at = ? WHERE id != ?",
                    (now, credential_id),
                )

            conn.execute(
                f"UPDATE payment_credentials SET {', '.join(assignments)} WHERE id = ?",
                params,
            )

        self.logger.info("Updated payment credential %s.", credential_id)
        return self.get_by_id(credential_id)

    def set_active(self, credential_id: str) -> CredentialRecord:
        now = utc_now()
        with self.database.transaction() as conn:
            conn.execute("UPDATE payment_credentials SET is_active = 0, updated_at = ?", (now,))
            cursor = conn.execute(
                "UPDATE payment_credentials SET is_active = 1, updated_at = ? WHERE id = ?",
                (now, credential_id),
            )
            if cursor.rowcount == 0:
                raise NotFound(actionable_error("credential_not_found", credential_id=credential_id))

        self.logger.info("Payment credential %s is now active.", credential_id)
        return self.get_by_id(credential_id)

    def delete(self, credential_id: str):
        with self.database.transaction() as conn:
            cursor = conn.execute("DELETE FROM payment_credentials WHERE id = ?", (credential_id,))
            if cursor.rowcount == 0:
                raise NotFound(actionable_error("credential_not_found", credential_id=credential_id))
        self.logger.info("Deleted payment credential %s.", credential_id)

    def get_active_client_config(self) -> Dict[str, str]:
        active = self.get_active()
        return {
            "api_key": active.api_key,
            "secret_key": active.secret_key,
            "uri": active.base_url,
        }

    def available_installments(self, amount: float) -> List[InstallmentOption]:
        active = self.get_active()
        return [option for option in active.installment_options if option.covers(amount)]

    def _reject_unknown_keys(self, payload: Mapping[str, Any]):
        unknown = sorted(set(payload) - set(self.WRITABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown credential fields: {', '.join(unknown)}")

    @staticmethod
    def _fetch(conn: sqlite3.Connection, credential_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            "SELECT * FROM payment_credentials WHERE id = ?",
            (credential_id,),
        ).fetchone()

    def _to_column(self, name: str, value: Any) -> Any:
        try:
            if name == "installment_options":
                return self._dump_options(value)
            if name in ("is_test_mode", "is_active"):
                return int(bool(value))
            if name == "installment":
                return int(value)
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid value for credential field '{name}': {exc}") from exc
        return value

    @staticmethod
    def _dump_options(options) -> Optional[str]:
        if options is None:
            return None
        serialized = []
        for option in options:
            if isinstance(option, InstallmentOption):
                serialized.append(
                    {"count": option.count, "minAmount": option.min_amount, "maxAmount": option.max_amount}
                )
            else:
                serialized.append(
                    {
                        "count": int(option["count"]),
                        "minAmount": float(option.get("minAmount", option.get("min_amount", 0))),
                        "maxAmount": float(option.get("maxAmount", option.get("max_amount", 0))),
                    }
                )
        return json.dumps(serialized)

    @staticmethod
    def _load_options(raw: Optional[str]) -> List[InstallmentOption]:
        if not raw:
            return []
        return [
            InstallmentOption(
                count=int(item["count"]),
                min_amount=float(item["minAmount"]),
                max_amount=float(item["maxAmount"]),
            )
            for item in json.loads(raw)
        ]

    def _to_record(self, row: sqlite3.Row) -> CredentialRecord:
        stored = dict(row)
        if self.field_crypto.has_encrypted_fields(stored, self.ENCRYPTED_FIELDS):
            stored = self.field_crypto.decrypt_fields(stored, self.ENCRYPTED_FIELDS)
        else:
            self.logger.debug("Credential %s holds legacy plaintext secrets.", stored["id"])

        return CredentialRecord(
            id=stored["id"],
            name=stored["name"],
            api_key=stored["api_key"],
            secret_key=stored["secret_key"],
            base_url=stored["base_url"],
            installment=int(stored["installment"]),
            is_test_mode=bool(stored["is_test_mode"]),
            currency=stored["currency"],
            is_active=bool(stored["is_active"]),
            installment_options=self._load_options(stored["installment_options"]),
            created_at=stored["created_at"],
            updated_at=stored["updated_at"],
        )
