"""
DynamoDB-backed credential storage.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from phlink.clients.credential_store import CredentialStore
from phlink.core.config import StorageSettings
from phlink.core.errors import StorageError
from phlink.models.credential import CredentialRecord

logger = logging.getLogger(__name__)

_REPLACED_FIELDS = (
    "external_user_id",
    "provider_user_id",
    "display_name",
    "username",
    "avatar_url",
    "access_token",
    "refresh_token",
    "expires_at",
    "updated_at",
)


class DynamoDBCredentialStore(CredentialStore):
    """Credential items under ``pk=user#<telegram id>``, ``sk=oauth#producthunt``.

    The table handle is created on first use, so building the store never
    touches AWS.
    """

    SORT_KEY = "oauth#producthunt"

    def __init__(self, settings: StorageSettings, *, table: Any | None = None) -> None:
        self._settings = settings
        self._resource: Any | None = None
        self._table = table

    @staticmethod
    def partition_key(external_user_id: str) -> str:
        return f"user#{external_user_id}"

    def _get_table(self) -> Any:
        if self._table is None:
            self._resource = boto3.resource(
                "dynamodb", region_name=self._settings.region_name
            )
            self._table = self._resource.Table(self._settings.dynamodb_table_name)
        return self._table

    def upsert(self, record: CredentialRecord) -> None:
        """Write every field in one ``UpdateItem``; ``created_at`` is set once."""
        serialized = record.model_dump(mode="json")
        names = {f"#{field}": field for field in _REPLACED_FIELDS}
        values = {f":{field}": serialized[field] for field in _REPLACED_FIELDS}
        names["#provider"] = "provider"
        values[":provider"] = "producthunt"
        names["#created_at"] = "created_at"
        values[":created_at"] = serialized["created_at"]

        assignments = [f"#{field} = :{field}" for field in _REPLACED_FIELDS]
        assignments.append("#provider = :provider")
        assignments.append("#created_at = if_not_exists(#created_at, :created_at)")

        try:
            self._get_table().update_item(
                Key={
                    "pk": self.partition_key(record.external_user_id),
                    "sk": self.SORT_KEY,
                },
                UpdateExpression="SET " + ", ".join(assignments),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"DynamoDB credential write failed: {exc}") from exc

    def get(self, external_user_id: str) -> Optional[CredentialRecord]:
        try:
            response = self._get_table().get_item(
                Key={"pk": self.partition_key(external_user_id), "sk": self.SORT_KEY}
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"DynamoDB credential read failed: {exc}") from exc
        item = response.get("Item")
        if not item:
            return None
        return self._record_from_item(item)

    def list_credentials(self) -> list[CredentialRecord]:
        scan_kwargs: Dict[str, Any] = {"FilterExpression": Attr("sk").eq(self.SORT_KEY)}
        records: list[CredentialRecord] = []
        try:
            while True:
                response = self._get_table().scan(**scan_kwargs)
                records.extend(
                    self._record_from_item(item) for item in response.get("Items", [])
                )
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"DynamoDB credential scan failed: {exc}") from exc
        return sorted(records, key=lambda record: record.created_at)

    def close(self) -> None:
        if self._resource is not None:
            self._resource.meta.client.close()
            logger.info("Closed DynamoDB client for credential store.")
        self._resource = None
        self._table = None

    @staticmethod
    def _record_from_item(item: Dict[str, Any]) -> CredentialRecord:
        fields = {key: item.get(key) for key in CredentialRecord.model_fields}
        return CredentialRecord.model_validate(
            {key: value for key, value in fields.items() if value is not None}
        )


__all__ = ["DynamoDBCredentialStore"]
