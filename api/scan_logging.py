"""Best-effort scan and feedback logging to PostgreSQL."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import psycopg
from psycopg.rows import dict_row

from coffee_scan.config import parse_bool

logger = logging.getLogger(__name__)

SAFE_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ScanLoggingConfig:
    enabled: bool = False
    database_url: str | None = None
    table: str = "user_scans"

    @property
    def feedback_table(self) -> str:
        return f"{self.table}_feedback"

    @classmethod
    def from_env(cls) -> "ScanLoggingConfig":
        table = os.getenv("SCAN_LOG_TABLE", "user_scans")
        return cls(
            enabled=parse_bool(os.getenv("SAVE_SCAN_LOG"), False),
            database_url=os.getenv("SCAN_LOG_DATABASE_URL") or os.getenv("DATABASE_URL"),
            table=table if SAFE_TABLE_NAME.match(table) else "user_scans",
        )


@dataclass(frozen=True)
class ScanRecord:
    request_id: str
    processing_method: str | None
    provider: str | None = None
    parser: str | None = None
    confidence: float | None = None
    processing_time_ms: int | None = None
    payload: bytes | None = None
    mime_type: str | None = None
    original_filename: str | None = None
    image_width: int | None = None
    image_height: int | None = None
    extraction: dict | None = None
    roaster_id: int | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    error_detail: str | None = None


class ScanLogger:
    def __init__(self, config: ScanLoggingConfig):
        self.config = config
        self._db_ready = False

    def should_log(self) -> bool:
        return self.config.enabled and bool(self.config.database_url)

    def new_request_id(self) -> str:
        return str(uuid.uuid4())

    def image_sha256(self, payload: bytes) -> str:
        return hashlib.sha256(payload).hexdigest()

    def log_scan(self, record: ScanRecord) -> None:
        if not self.should_log():
            return

        row = (
            record.request_id,
            _utc_now_iso(),
            record.processing_method,
            record.provider,
            record.parser,
            record.confidence,
            record.processing_time_ms,
            self.image_sha256(record.payload) if record.payload else None,
            record.mime_type,
            len(record.payload) if record.payload else None,
            record.original_filename,
            record.image_width,
            record.image_height,
            json.dumps(record.extraction, ensure_ascii=False) if record.extraction is not None else None,
            record.roaster_id,
            record.ip_address,
            record.user_agent,
            record.error_detail[:2000] if record.error_detail else None,
        )
        insert_sql = f"""
            insert into {self.config.table} (
              request_id, created_at, processing_method, provider, parser, confidence,
              processing_time_ms, image_sha256, mime_type, image_size_bytes, original_filename,
              image_width, image_height, extracted_json, roaster_id, ip_address, user_agent, error_detail
            ) values (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            on conflict (request_id) do nothing
        """
        try:
            with psycopg.connect(self.config.database_url) as conn:
                with conn.cursor() as cur:
                    self._ensure_tables(cur)
                    cur.execute(insert_sql, row)
                conn.commit()
        except psycopg.Error as exc:
            # Logging should never break the scan API.
            logger.warning("scan log insert failed: %s", exc)

    def save_feedback(self, scan_id: str, feedback: dict) -> bool:
        if not self.should_log():
            logger.info("feedback for scan %s not stored, scan logging disabled", scan_id)
            return False

        insert_sql = f"""
            insert into {self.config.feedback_table} (request_id, created_at, feedback_json)
            values (%s, %s, %s)
        """
        try:
            with psycopg.connect(self.config.database_url) as conn:
                with conn.cursor() as cur:
                    self._ensure_tables(cur)
                    cur.execute(insert_sql, (scan_id, _utc_now_iso(), json.dumps(feedback, ensure_ascii=False)))
                conn.commit()
        except psycopg.Error as exc:
            logger.warning("feedback insert failed: %s", exc)
            return False
        return True

    def get_scan(self, scan_id: str) -> dict | None:
        if not self.should_log():
            return None

        select_sql = f"""
            select request_id, created_at, processing_method, provider, parser, confidence,
                   processing_time_ms, mime_type, image_size_bytes, original_filename,
                   image_width, image_height, extracted_json, roaster_id, error_detail
            from {self.config.table}
            where request_id = %s
        """
        try:
            with psycopg.connect(self.config.database_url, row_factory=dict_row) as conn:
                with conn.cursor() as cur:
                    self._ensure_tables(cur)
                    cur.execute(select_sql, (scan_id,))
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            logger.warning("scan lookup failed: %s", exc)
            return None
        if not row:
            return None
        created_at = row.get("created_at")
        if isinstance(created_at, datetime):
            row["created_at"] = created_at.isoformat()
        return row

    def _ensure_tables(self, cur) -> None:
        if self._db_ready:
            return
        cur.execute(
            f"""
            create table if not exists {self.config.table} (
              id bigserial primary key,
              request_id text not null unique,
              created_at timestamptz not null default now(),
              processing_method text null,
              provider text null,
              parser text null,
              confidence double precision null,
              processing_time_ms integer null,
              image_sha256 text null,
              mime_type text null,
              image_size_bytes integer null,
              original_filename text null,
              image_width integer null,
              image_height integer null,
              extracted_json jsonb null,
              roaster_id integer null,
              ip_address text null,
              user_agent text null,
              error_detail text null
            )
            """
        )
        cur.execute(
            f"""
            create table if not exists {self.config.feedback_table} (
              id bigserial primary key,
              request_id text not null,
              created_at timestamptz not null default now(),
              feedback_json jsonb not null
            )
            """
        )
        self._db_ready = True
