"""
Tabular store interface used by the conversion engine.

The engine only needs to enumerate rows, look a row up by key, insert rows in
the table's column order, update rows by key and delete rows by key. Rows are
handed out as plain dicts keyed by column name; callers write back through
``update`` rather than mutating them.

``MemoryDatabase`` keeps everything in dicts and is what the tests run on.
``papiconv.converter_core.sqlite_store`` provides a file-backed store.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from papiconv.converter_core.errors import ConversionError, MissingTableError
from papiconv.converter_core.rounds import default_round_columns
from papiconv.converter_core.schema import (
    INFO_COLUMNS,
    INFO_TABLE,
    PLAYER_COLUMNS,
    PLAYER_TABLE,
    REF_COLUMN,
    SENTINEL_NAME,
    SENTINEL_REF,
)


def sentinel_row() -> Dict[str, Any]:
    """The EXEMPT row present in every blank tournament store."""
    row: Dict[str, Any] = {column: None for column in PLAYER_COLUMNS}
    row.update(
        {
            REF_COLUMN: SENTINEL_REF,
            "Nom": SENTINEL_NAME,
            "ClubRef": 0,
            "Fixe": 0,
            "InscriptionRegle": 0,
            "InscriptionDu": 0,
        }
    )
    row.update(default_round_columns())
    return row


class Table(ABC):
    """A named table with a fixed list of columns."""

    def __init__(self, name: str, columns: Sequence[str]):
        self.name = name
        self._columns = list(columns)

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @abstractmethod
    def __iter__(self) -> Iterator[Dict[str, Any]]:
        """Yield a copy of every row, in storage order."""

    @abstractmethod
    def insert(self, values: Sequence[Any]):
        """Append a row given as values in ``columns`` order."""

    @abstractmethod
    def update(self, key_column: str, row: Dict[str, Any]):
        """Overwrite the row whose ``key_column`` matches ``row[key_column]``."""

    @abstractmethod
    def delete(self, key_column: str, keys: Iterable[Any]):
        """Delete every row whose ``key_column`` value is in ``keys``."""

    def find(self, key_column: str, key: Any) -> Optional[Dict[str, Any]]:
        for row in self:
            if row.get(key_column) == key:
                return row
        return None

    def insert_row(self, row: Dict[str, Any]):
        self.insert([row.get(column) for column in self._columns])

    def _check_width(self, values: Sequence[Any]):
        if len(values) != len(self._columns):
            raise ConversionError(
                f"Table {self.name} has {len(self._columns)} columns, got {len(values)} values"
            )


class Database(ABC):
    """A set of tables opened for one conversion.

    Used as a context manager; the handle is closed on every exit path.
    Nothing is committed implicitly.
    """

    @abstractmethod
    def table_names(self) -> List[str]:
        pass

    @abstractmethod
    def _open_table(self, name: str) -> Table:
        pass

    def has_table(self, name: str) -> bool:
        return name in self.table_names()

    def table(self, name: str) -> Table:
        if not self.has_table(name):
            raise MissingTableError(name)
        return self._open_table(name)

    def require(self, *names: str):
        """Raise ``MissingTableError`` for the first absent table."""
        for name in names:
            if not self.has_table(name):
                raise MissingTableError(name)

    def commit(self):
        pass

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False


class MemoryTable(Table):
    def __init__(self, name: str, columns: Sequence[str]):
        super().__init__(name, columns)
        self._rows: List[Dict[str, Any]] = []

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter([dict(row) for row in self._rows])

    def __len__(self) -> int:
        return len(self._rows)

    def insert(self, values: Sequence[Any]):
        self._check_width(values)
        self._rows.append(dict(zip(self._columns, values)))

    def update(self, key_column: str, row: Dict[str, Any]):
        key = row.get(key_column)
        for stored in self._rows:
            if stored.get(key_column) == key:
                stored.update(
                    {column: value for column, value in row.items() if column in stored}
                )
                return
        raise ConversionError(f"No row with {key_column}={key!r} in table {self.name}")

    def delete(self, key_column: str, keys: Iterable[Any]):
        doomed = set(keys)
        self._rows = [row for row in self._rows if row.get(key_column) not in doomed]


class MemoryDatabase(Database):
    """In-memory store, mainly for tests and dry runs."""

    def __init__(self):
        self.tables: Dict[str, MemoryTable] = {}
        self.closed = False
        self.commits = 0

    @classmethod
    def blank_tournament(cls) -> "MemoryDatabase":
        """A store with empty ``INFO`` and a ``JOUEUR`` holding only EXEMPT."""
        database = cls()
        database.create_table(INFO_TABLE, INFO_COLUMNS)
        database.create_table(PLAYER_TABLE, PLAYER_COLUMNS).insert_row(sentinel_row())
        return database

    def create_table(self, name: str, columns: Sequence[str]) -> MemoryTable:
        table = MemoryTable(name, columns)
        self.tables[name] = table
        return table

    def table_names(self) -> List[str]:
        return list(self.tables)

    def _open_table(self, name: str) -> Table:
        return self.tables[name]

    def commit(self):
        self.commits += 1

    def close(self):
        self.closed = True
