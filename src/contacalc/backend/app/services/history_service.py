"""Helpers for persisting and exporting completed calculations."""

from __future__ import annotations

import csv
import json
import logging
import os
import sqlite3
from collections import Counter, OrderedDict
from contextlib import closing, contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from io import StringIO
from threading import Lock
from typing import Any, Callable, Iterable, Iterator, Mapping, Protocol
from uuid import uuid4

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from contacalc.backend.app.localization import Translator, get_translator

from .calculators import format_currency

_LOGGER = logging.getLogger(__name__)

_MAX_EXPIRY = datetime.max.replace(tzinfo=timezone.utc)
_RECENT_WINDOW = timedelta(days=30)
SORT_ORDERS = ("asc", "desc")
COUNT_KEYS = frozenset({"number_of_payments"})
PERCENT_KEYS = frozenset({"return_percentage", "annualized_return"})


@dataclass(frozen=True)
class HistoryRecord:
    """Persisted snapshot of a completed calculation."""

    id: str
    type: str
    parameters: Mapping[str, Any]
    result: Mapping[str, Any]
    description: str | None
    locale: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, *, now: datetime | None = None) -> bool:
        """Return ``True`` when the record has passed its expiry timestamp."""

        reference = now or datetime.now(timezone.utc)
        return reference >= self.expires_at

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON representation exposed by the history endpoints."""

        payload: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "parameters": dict(self.parameters),
            "result": dict(self.result),
            "locale": self.locale,
            "createdAt": self.created_at.isoformat(),
        }
        if self.description is not None:
            payload["description"] = self.description
        return payload


class HistoryRepository(Protocol):
    """Storage interface shared by the history backends."""

    def save(self, data: Mapping[str, Any]) -> HistoryRecord: ...

    def get(self, record_id: str) -> HistoryRecord: ...

    def delete(self, record_id: str) -> None: ...

    def list(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        calculation_type: str | None = None,
        sort_order: str = "desc",
    ) -> tuple[list[HistoryRecord], int]: ...

    def statistics(self, *, now: datetime | None = None) -> dict[str, Any]: ...


def _validate_limits(ttl_seconds: int | None, max_items: int | None) -> None:
    if ttl_seconds is not None and ttl_seconds <= 0:
        raise ValueError("ttl_seconds must be positive when provided")
    if max_items is not None and max_items <= 0:
        raise ValueError("max_items must be positive when provided")


def _validate_paging(page: int, limit: int, sort_order: str) -> None:
    if page < 1:
        raise ValueError("page must be at least 1")
    if limit < 1:
        raise ValueError("limit must be at least 1")
    if sort_order not in SORT_ORDERS:
        raise ValueError("sort_order must be 'asc' or 'desc'")


def _build_record(
    data: Mapping[str, Any], now: datetime, ttl: timedelta | None
) -> HistoryRecord:
    description = data.get("description")
    return HistoryRecord(
        id=uuid4().hex,
        type=str(data["type"]),
        parameters=dict(data.get("parameters") or {}),
        result=dict(data["result"]),
        description=str(description) if description is not None else None,
        locale=str(data.get("locale") or "pt"),
        created_at=now,
        expires_at=now + ttl if ttl is not None else _MAX_EXPIRY,
    )


class InMemoryHistoryRepository:
    """Thread-safe in-memory history storage with TTL support."""

    def __init__(
        self,
        *,
        ttl_seconds: int | None = 60 * 60 * 24 * 30,
        max_items: int | None = 500,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        _validate_limits(ttl_seconds, max_items)

        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds is not None else None
        self._max_items = max_items
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._records: "OrderedDict[str, HistoryRecord]" = OrderedDict()
        self._lock = Lock()

    def _cleanup_locked(self, now: datetime) -> None:
        if self._ttl is not None:
            expired_keys = [
                key for key, record in self._records.items() if record.expires_at <= now
            ]
            for key in expired_keys:
                self._records.pop(key, None)

        if self._max_items is not None:
            while len(self._records) > self._max_items:
                self._records.popitem(last=False)

    def save(self, data: Mapping[str, Any]) -> HistoryRecord:
        now = self._clock()
        record = _build_record(data, now, self._ttl)
        with self._lock:
            self._cleanup_locked(now)
            self._records[record.id] = record
            self._cleanup_locked(now)
        return record

    def get(self, record_id: str) -> HistoryRecord:
        now = self._clock()
        with self._lock:
            self._cleanup_locked(now)
            record = self._records.get(record_id)
            if record is None:
                raise KeyError(record_id)
            return record

    def delete(self, record_id: str) -> None:
        now = self._clock()
        with self._lock:
            self._cleanup_locked(now)
            if self._records.pop(record_id, None) is None:
                raise KeyError(record_id)

    def list(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        calculation_type: str | None = None,
        sort_order: str = "desc",
    ) -> tuple[list[HistoryRecord], int]:
        _validate_paging(page, limit, sort_order)
        now = self._clock()
        with self._lock:
            self._cleanup_locked(now)
            records = [
                record
                for record in self._records.values()
                if calculation_type is None or record.type == calculation_type
            ]

        records.sort(key=lambda record: record.created_at)
        if sort_order == "desc":
            records.reverse()

        start = (page - 1) * limit
        return records[start : start + limit], len(records)

    def statistics(self, *, now: datetime | None = None) -> dict[str, Any]:
        reference = now or self._clock()
        with self._lock:
            self._cleanup_locked(reference)
            records = list(self._records.values())

        return _summarise(records, reference)


class SQLiteHistoryRepository:
    """SQLite-backed history repository providing persistence and TTL enforcement."""

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        ttl_seconds: int | None = 60 * 60 * 24 * 30,
        max_items: int | None = 5000,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        _validate_limits(ttl_seconds, max_items)

        self._path = str(path)
        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds is not None else None
        self._max_items = max_items
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = Lock()
        self._initialise()

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._path, check_same_thread=False)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA journal_mode=WAL")
        connection.execute("PRAGMA synchronous=NORMAL")
        return connection

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and is always closed."""

        with closing(self._connect()) as connection:
            with connection:
                yield connection

    def _initialise(self) -> None:
        with self._transaction() as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS calculations (
                    id TEXT PRIMARY KEY,
                    type TEXT NOT NULL,
                    parameters TEXT NOT NULL,
                    result TEXT NOT NULL,
                    description TEXT,
                    locale TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    expires_at TEXT NOT NULL
                )
                """
            )
            connection.execute(
                "CREATE INDEX IF NOT EXISTS calculations_type_idx ON calculations (type)"
            )

    def _cleanup_locked(self, connection: sqlite3.Connection, now: datetime) -> None:
        if self._ttl is not None:
            connection.execute(
                "DELETE FROM calculations WHERE expires_at <= ?",
                (now.isoformat(),),
            )
        if self._max_items is not None:
            excess = connection.execute(
                "SELECT COUNT(*) - ? FROM calculations",
                (self._max_items,),
            ).fetchone()[0]
            if excess is not None and excess > 0:
                connection.execute(
                    "DELETE FROM calculations WHERE id IN ("
                    "SELECT id FROM calculations ORDER BY created_at ASC, rowid ASC LIMIT ?"
                    ")",
                    (excess,),
                )

    @staticmethod
    def _parse_timestamp(value: str) -> datetime:
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @classmethod
    def _decode_record(cls, row: sqlite3.Row) -> HistoryRecord:
        return HistoryRecord(
            id=row["id"],
            type=row["type"],
            parameters=json.loads(row["parameters"]),
            result=json.loads(row["result"]),
            description=row["description"],
            locale=row["locale"],
            created_at=cls._parse_timestamp(row["created_at"]),
            expires_at=cls._parse_timestamp(row["expires_at"]),
        )

    def save(self, data: Mapping[str, Any]) -> HistoryRecord:
        now = self._clock()
        record = _build_record(data, now, self._ttl)

        with self._lock:
            with self._transaction() as connection:
                connection.execute(
                    "INSERT INTO calculations"
                    " (id, type, parameters, result, description, locale, created_at, expires_at)"
                    " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        record.id,
                        record.type,
                        json.dumps(record.parameters, ensure_ascii=False),
                        json.dumps(record.result, ensure_ascii=False),
                        record.description,
                        record.locale,
                        record.created_at.isoformat(),
                        record.expires_at.isoformat(),
                    ),
                )
                self._cleanup_locked(connection, now)
        return record

    def get(self, record_id: str) -> HistoryRecord:
        now = self._clock()
        with self._lock:
            with self._transaction() as connection:
                self._cleanup_locked(connection, now)
                row = connection.execute(
                    "SELECT * FROM calculations WHERE id = ?",
                    (record_id,),
                ).fetchone()
        if row is None:
            raise KeyError(record_id)
        return self._decode_record(row)

    def delete(self, record_id: str) -> None:
        now = self._clock()
        with self._lock:
            with self._transaction() as connection:
                self._cleanup_locked(connection, now)
                cursor = connection.execute(
                    "DELETE FROM calculations WHERE id = ?",
                    (record_id,),
                )
                if cursor.rowcount == 0:
                    raise KeyError(record_id)

    def list(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        calculation_type: str | None = None,
        sort_order: str = "desc",
    ) -> tuple[list[HistoryRecord], int]:
        _validate_paging(page, limit, sort_order)
        now = self._clock()
        direction = "DESC" if sort_order == "desc" else "ASC"
        where = ""
        arguments: tuple[Any, ...] = ()
        if calculation_type is not None:
            where = " WHERE type = ?"
            arguments = (calculation_type,)

        with self._lock:
            with self._transaction() as connection:
                self._cleanup_locked(connection, now)
                total = connection.execute(
                    f"SELECT COUNT(*) FROM calculations{where}", arguments
                ).fetchone()[0]
                rows = connection.execute(
                    f"SELECT * FROM calculations{where}"
                    f" ORDER BY created_at {direction}, rowid {direction} LIMIT ? OFFSET ?",
                    (*arguments, limit, (page - 1) * limit),
                ).fetchall()

        return [self._decode_record(row) for row in rows], int(total)

    def statistics(self, *, now: datetime | None = None) -> dict[str, Any]:
        reference = now or self._clock()
        with self._lock:
            with self._transaction() as connection:
                self._cleanup_locked(connection, reference)
                rows = connection.execute("SELECT * FROM calculations").fetchall()

        return _summarise([self._decode_record(row) for row in rows], reference)


def _summarise(records: Iterable[HistoryRecord], now: datetime) -> dict[str, Any]:
    records = list(records)
    threshold = now - _RECENT_WINDOW
    by_type = Counter(record.type for record in records)
    return {
        "totalCalculations": len(records),
        "recentCalculations": sum(1 for record in records if record.created_at >= threshold),
        "byType": dict(sorted(by_type.items())),
    }


def record_calculation(
    repository: HistoryRepository | None, data: Mapping[str, Any]
) -> HistoryRecord | None:
    """Persist ``data`` when history is enabled, never failing the caller."""

    if repository is None:
        return None

    try:
        return repository.save(data)
    except (sqlite3.Error, OSError, KeyError, TypeError, ValueError) as error:
        _LOGGER.warning("Failed to record %s calculation: %s", data.get("type"), error)
        return None


def _format_value(item: Mapping[str, Any]) -> str:
    """Render a breakdown value as money unless its key names a count or a rate."""

    key = item.get("key")
    value = float(item.get("value") or 0)
    if key in COUNT_KEYS:
        return f"{value:g}"
    if key in PERCENT_KEYS:
        return f"{value:.2f}%"
    return format_currency(value)


def _breakdown_rows(record: HistoryRecord) -> Iterable[tuple[str, str, str]]:
    for item in record.result.get("breakdown", []):
        if not isinstance(item, Mapping):
            continue
        percentage = item.get("percentage")
        share = f"{float(percentage):.2f}%" if percentage is not None else ""
        yield str(item.get("label") or item.get("key") or ""), _format_value(item), share


def _type_name(record: HistoryRecord, translator: Translator) -> str:
    return translator(f"types.{record.type}.name")


def render_csv(record: HistoryRecord) -> str:
    """Return the calculation as a CSV document."""

    translator = get_translator(record.locale)
    buffer = StringIO()
    writer = csv.writer(buffer)

    writer.writerow([translator("export.type"), _type_name(record, translator)])
    if record.description:
        writer.writerow([translator("export.description"), record.description])
    writer.writerow([translator("export.created_at"), record.created_at.isoformat()])
    writer.writerow([])

    writer.writerow([translator("export.parameters")])
    for name, value in record.parameters.items():
        writer.writerow([name, value])
    writer.writerow([])

    writer.writerow(
        [translator("export.item"), translator("export.value"), translator("export.percentage")]
    )
    for row in _breakdown_rows(record):
        writer.writerow(row)
    writer.writerow(
        [translator("export.total"), format_currency(float(record.result.get("total") or 0)), ""]
    )

    recommendations = record.result.get("recommendations") or []
    if recommendations:
        writer.writerow([])
        writer.writerow([translator("export.recommendations")])
        for recommendation in recommendations:
            writer.writerow([recommendation])

    return buffer.getvalue()


def _latin1(text: str) -> str:
    """Replace characters the core PDF fonts cannot encode."""

    return text.encode("latin-1", errors="replace").decode("latin-1")


def _write_line(pdf: FPDF, height: float, text: str) -> None:
    pdf.multi_cell(pdf.epw, height, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def render_pdf(record: HistoryRecord) -> bytes:
    """Return the calculation rendered as a single-page PDF report."""

    translator = get_translator(record.locale)

    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()
    pdf.set_title(_latin1(translator("export.title")))
    pdf.set_text_color(33, 37, 41)

    pdf.set_font("Helvetica", style="B", size=16)
    pdf.cell(
        0, 10, _latin1(_type_name(record, translator)), new_x=XPos.LMARGIN, new_y=YPos.NEXT
    )

    pdf.set_font("Helvetica", size=11)
    if record.description:
        _write_line(pdf, 6, record.description)
    _write_line(pdf, 6, f"{translator('export.created_at')}: {record.created_at.isoformat()}")

    pdf.ln(4)
    pdf.set_font("Helvetica", style="B", size=12)
    pdf.cell(
        0, 8, _latin1(translator("export.parameters")), new_x=XPos.LMARGIN, new_y=YPos.NEXT
    )
    pdf.set_font("Helvetica", size=11)
    for name, value in record.parameters.items():
        _write_line(pdf, 6, f"{name}: {value}")

    pdf.ln(4)
    pdf.set_font("Helvetica", style="B", size=12)
    pdf.cell(
        0, 8, _latin1(translator("export.breakdown")), new_x=XPos.LMARGIN, new_y=YPos.NEXT
    )
    pdf.set_font("Helvetica", size=11)
    for label, value, share in _breakdown_rows(record):
        suffix = f" ({share})" if share else ""
        _write_line(pdf, 6, f"{label}: {value}{suffix}")

    pdf.set_font("Helvetica", style="B", size=12)
    total = format_currency(float(record.result.get("total") or 0))
    _write_line(pdf, 8, f"{translator('export.total')}: {total}")

    recommendations = record.result.get("recommendations") or []
    if recommendations:
        pdf.ln(4)
        pdf.cell(
            0,
            8,
            _latin1(translator("export.recommendations")),
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )
        pdf.set_font("Helvetica", size=11)
        for recommendation in recommendations:
            _write_line(pdf, 6, f"- {recommendation}")

    output = pdf.output()
    if isinstance(output, (bytes, bytearray)):
        return bytes(output)
    return output.encode("latin1")


__all__ = [
    "HistoryRecord",
    "HistoryRepository",
    "InMemoryHistoryRepository",
    "SORT_ORDERS",
    "SQLiteHistoryRepository",
    "record_calculation",
    "render_csv",
    "render_pdf",
]
