from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import from_naive_utc
from ..core.enums import DocumentType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CompanyFile, StoredFile
from .repository import FileRepository

_FILE_COLUMNS = "f.file_id, f.file_hash, f.original_filename, f.mime_type, f.file_size, f.storage_path, f.uploaded_by, f.created_at"


def _row_to_file(row: dict) -> StoredFile:
    return StoredFile(
        file_id=int(row["file_id"]),
        file_hash=row["file_hash"],
        original_filename=row["original_filename"],
        mime_type=row["mime_type"],
        size=int(row["file_size"]),
        storage_path=row["storage_path"],
        uploaded_by=int(row["uploaded_by"]),
        created_at=from_naive_utc(row.get("created_at")),
    )


def _row_to_company_file(row: dict) -> CompanyFile:
    return CompanyFile(
        company_id=int(row["company_id"]),
        file=_row_to_file(row),
        document_type=DocumentType(row["document_type"]),
        attached_by=int(row["attached_by"]),
        purpose=row.get("purpose"),
        attached_at=from_naive_utc(row.get("attached_at")),
    )


class MySQLFileRepository(FileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, file_id: int) -> Optional[StoredFile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_FILE_COLUMNS} FROM files f WHERE f.file_id=%s", (file_id,))
            row = fetchone(cur)
            return _row_to_file(row) if row else None

    def get_by_hash(self, file_hash: str) -> Optional[StoredFile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_FILE_COLUMNS} FROM files f WHERE f.file_hash=%s", (file_hash.lower(),))
            row = fetchone(cur)
            return _row_to_file(row) if row else None

    def create_file(
        self,
        *,
        file_hash: str,
        original_filename: str,
        mime_type: str,
        size: int,
        storage_path: str,
        uploaded_by: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO files(file_hash, original_filename, mime_type, file_size, storage_path, uploaded_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (file_hash.lower(), original_filename, mime_type, int(size), storage_path, uploaded_by),
            )
            return int(cur.lastrowid)

    def delete_file(self, file_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM files WHERE file_id=%s", (file_id,))
            return cur.rowcount > 0

    def attach(
        self,
        *,
        company_id: int,
        file_id: int,
        document_type: DocumentType,
        attached_by: int,
        purpose: Optional[str] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO company_files(company_id, file_id, document_type, purpose, attached_by)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    file_id=VALUES(file_id),
                    purpose=VALUES(purpose),
                    attached_by=VALUES(attached_by),
                    attached_at=CURRENT_TIMESTAMP
                """,
                (company_id, file_id, document_type.value, purpose, attached_by),
            )

    def detach(self, company_id: int, file_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM company_files WHERE company_id=%s AND file_id=%s", (company_id, file_id))
            return int(cur.rowcount)

    def count_links(self, file_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM company_files WHERE file_id=%s", (file_id,))
            return int((fetchone(cur) or {}).get("total", 0))

    def list_company_files(self, company_id: int, document_type: Optional[DocumentType] = None) -> Sequence[CompanyFile]:
        sql = f"""
            SELECT cf.company_id, cf.document_type, cf.purpose, cf.attached_by, cf.attached_at, {_FILE_COLUMNS}
            FROM company_files cf
            JOIN files f ON f.file_id = cf.file_id
            WHERE cf.company_id=%s
        """
        params: list = [company_id]
        if document_type is not None:
            sql += " AND cf.document_type=%s"
            params.append(document_type.value)
        sql += " ORDER BY cf.attached_at DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_company_file(r) for r in fetchall(cur)]

    def is_linked_to_company(self, company_id: int, file_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS linked FROM company_files WHERE company_id=%s AND file_id=%s LIMIT 1",
                (company_id, file_id),
            )
            return fetchone(cur) is not None
