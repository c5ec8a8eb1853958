"""Payload repository for database operations."""

from dataclasses import dataclass
from typing import Optional

from common.logging_config import get_logger
from relay.database import get_db_connection

logger = get_logger(__name__)


@dataclass
class StoredPayload:
    id: str
    payload: str
    file_count: int
    total_size: int
    created_at: int
    expires_at: int
    access_count: int


class PayloadRepository:
    @staticmethod
    def create_payload(
        payload_id: str,
        payload: str,
        file_count: int,
        total_size: int,
        created_at: int,
        expires_at: int
    ) -> StoredPayload:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO encoded_payloads (id, payload, file_count, total_size, created_at, expires_at, access_count)
                VALUES (?, ?, ?, ?, ?, ?, 0)
                """,
                (payload_id, payload, file_count, total_size, created_at, expires_at)
            )
            conn.commit()

        return StoredPayload(
            id=payload_id,
            payload=payload,
            file_count=file_count,
            total_size=total_size,
            created_at=created_at,
            expires_at=expires_at,
            access_count=0,
        )

    @staticmethod
    def get_by_id(payload_id: str) -> Optional[StoredPayload]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, payload, file_count, total_size, created_at, expires_at, access_count
                FROM encoded_payloads WHERE id = ?
                """,
                (payload_id,)
            )
            row = cursor.fetchone()

            if row is None:
                return None

            return StoredPayload(
                id=row["id"],
                payload=row["payload"],
                file_count=row["file_count"],
                total_size=row["total_size"],
                created_at=row["created_at"],
                expires_at=row["expires_at"],
                access_count=row["access_count"],
            )

    @staticmethod
    def increment_access_count(payload_id: str) -> bool:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE encoded_payloads SET access_count = access_count + 1 WHERE id = ?",
                (payload_id,)
            )
            conn.commit()
            return cursor.rowcount > 0

    @staticmethod
    def delete_payload(payload_id: str) -> bool:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM encoded_payloads WHERE id = ?", (payload_id,))
            conn.commit()
            return cursor.rowcount > 0

    @staticmethod
    def delete_expired(now_ms: int) -> int:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM encoded_payloads WHERE expires_at < ?", (now_ms,))
            conn.commit()
            deleted = cursor.rowcount

        if deleted:
            logger.info(f"Purged {deleted} expired payloads")
        return deleted
