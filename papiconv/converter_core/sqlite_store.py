"""
SQLite-backed tournament store.

Holds the same ``INFO`` and ``JOUEUR`` tables as a PAPI file. Columns whose
type matters on the way back out are declared as ``DATE``/``BOOLEAN`` and
converted on read; everything else is stored untyped so values come back
exactly as they went in.
"""

import logging
import sqlite3
from datetime import date
from typing import Any, Dict, Iterable, Iterator, List, Sequence

from papiconv.converter_core.errors import ConversionError, NotAStoreError
from papiconv.converter_core.schema import (
    BIRTH_DATE_COLUMN,
    CHECKED_IN_COLUMN,
    COLOR_SUFFIX,
    INFO_TABLE,
    INFO_VALUE,
    INFO_VARIABLE,
    OPPONENT_SUFFIX,
    PLAYER_COLUMNS,
    PLAYER_TABLE,
    REF_COLUMN,
    RESULT_SUFFIX,
)
from papiconv.converter_core.tables import Database, Table, sentinel_row

logger = logging.getLogger(__name__)


def _convert_date(raw: bytes) -> Any:
    text = raw.decode("utf-8")
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return text


def _convert_boolean(raw: bytes) -> bool:
    return raw.strip() not in (b"", b"0")


sqlite3.register_adapter(date, lambda value: value.isoformat())
sqlite3.register_converter("DATE", _convert_date)
sqlite3.register_converter("BOOLEAN", _convert_boolean)


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _column_type(column: str) -> str:
    if column == REF_COLUMN:
        return "INTEGER"
    if column == BIRTH_DATE_COLUMN:
        return "DATE"
    if column == CHECKED_IN_COLUMN:
        return "BOOLEAN"
    if column.startswith("Rd"):
        if column.endswith(COLOR_SUFFIX):
            return "TEXT"
        if column.endswith(OPPONENT_SUFFIX) or column.endswith(RESULT_SUFFIX):
            return "INTEGER"
    return ""


class SqliteTable(Table):
    def __init__(self, connection: sqlite3.Connection, name: str, columns: Sequence[str]):
        super().__init__(name, columns)
        self._connection = connection

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        cursor = self._connection.execute(
            f"SELECT * FROM {_quote(self.name)} ORDER BY rowid"
        )
        for row in cursor.fetchall():
            yield {key: row[key] for key in row.keys()}

    def insert(self, values: Sequence[Any]):
        self._check_width(values)
        columns = ", ".join(_quote(column) for column in self._columns)
        placeholders = ", ".join("?" for _ in self._columns)
        self._connection.execute(
            f"INSERT INTO {_quote(self.name)} ({columns}) VALUES ({placeholders})",
            list(values),
        )

    def update(self, key_column: str, row: Dict[str, Any]):
        assignments = [column for column in row if column in self._columns and column != key_column]
        if not assignments:
            return
        sql = "UPDATE {} SET {} WHERE {} = ?".format(
            _quote(self.name),
            ", ".join(f"{_quote(column)} = ?" for column in assignments),
            _quote(key_column),
        )
        cursor = self._connection.execute(
            sql, [row[column] for column in assignments] + [row.get(key_column)]
        )
        if cursor.rowcount == 0:
            raise ConversionError(
                f"No row with {key_column}={row.get(key_column)!r} in table {self.name}"
            )

    def delete(self, key_column: str, keys: Iterable[Any]):
        self._connection.executemany(
            f"DELETE FROM {_quote(self.name)} WHERE {_quote(key_column)} = ?",
            [(key,) for key in keys],
        )


class SqliteDatabase(Database):
    """A tournament store in a SQLite file."""

    def __init__(self, path: str):
        self.path = path
        self._connection = sqlite3.connect(path, detect_types=sqlite3.PARSE_DECLTYPES)
        self._connection.row_factory = sqlite3.Row

    def table_names(self) -> List[str]:
        cursor = self._connection.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
        )
        return [row["name"] for row in cursor.fetchall()]

    def _open_table(self, name: str) -> Table:
        cursor = self._connection.execute(f"PRAGMA table_info({_quote(name)})")
        columns = [row["name"] for row in cursor.fetchall()]
        return SqliteTable(self._connection, name, columns)

    def create_tournament_schema(self):
        """Create empty ``INFO`` and ``JOUEUR`` tables with the EXEMPT row.

        Tables that already exist are left alone.
        """
        if not self.has_table(INFO_TABLE):
            self._connection.execute(
                f"CREATE TABLE {_quote(INFO_TABLE)} "
                f"({_quote(INFO_VARIABLE)} TEXT, {_quote(INFO_VALUE)} TEXT)"
            )
        if not self.has_table(PLAYER_TABLE):
            columns = ", ".join(
                f"{_quote(column)} {_column_type(column)}".rstrip()
                for column in PLAYER_COLUMNS
            )
            self._connection.execute(f"CREATE TABLE {_quote(PLAYER_TABLE)} ({columns})")
            self.table(PLAYER_TABLE).insert_row(sentinel_row())
            logger.debug("Created %s with EXEMPT row in %s", PLAYER_TABLE, self.path)
        self._connection.commit()

    def commit(self):
        self._connection.commit()

    def close(self):
        # Uncommitted work is discarded
        self._connection.close()


def open_database(path: str, create: bool = False) -> SqliteDatabase:
    """Open the store at ``path``, creating the tournament tables if asked."""
    database = SqliteDatabase(path)
    try:
        # sqlite3 only reads the file header on the first statement
        database.table_names()
        if create:
            database.create_tournament_schema()
    except sqlite3.DatabaseError as e:
        database.close()
        raise NotAStoreError(path) from e
    except Exception:
        database.close()
        raise
    return database
