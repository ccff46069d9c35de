"""Benchmark configuration and per-thread database state."""

from __future__ import annotations

import contextlib
import enum
import random
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional, Sequence

from tpccbench.rand import convert_to_pq

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DISTRICT_PER_WAREHOUSE = 10
TABLES = (
    "item",
    "customer",
    "district",
    "history",
    "new_order",
    "order_line",
    "orders",
    "stock",
    "warehouse",
)
DEFAULT_WEIGHTS = (45, 43, 4, 4, 4)

Connector = Callable[[], Any]


class PartitionType(enum.IntEnum):
    """How the per-warehouse tables are partitioned."""

    HASH = 1
    RANGE = 2
    LIST_AS_HASH = 3
    LIST_AS_RANGE = 4


class NoRowsError(LookupError):
    """A query expected to return a row returned none."""


@dataclass
class Config:
    """Settings for a TPC-C run.

    ``weight`` holds the mix for new-order, payment, order-status, delivery
    and stock-level; it must have five entries summing to 100, or be empty
    to take the default mix. Durations are in seconds.
    """

    driver: str = "mysql"
    db_name: str = "tpcc"
    threads: int = 1
    parts: int = 1
    partition_type: PartitionType = PartitionType.HASH
    warehouses: int = 10
    use_fk: bool = False
    isolation: int = 0
    check_all: bool = False
    no_check: bool = False
    weight: list[int] = field(default_factory=list)
    wait: bool = False
    max_measure_latency: float = 16.0
    output_type: str = ""
    output_dir: str = ""
    specified_tables: str = ""
    prepare_retry_count: int = 0
    prepare_retry_interval: float = 5.0
    output_style: str = "plain"
    conn_refresh_interval: float = 0.0

    def __post_init__(self) -> None:
        try:
            self.partition_type = PartitionType(self.partition_type)
        except ValueError:
            raise ValueError(f"Unknown partition type {self.partition_type}") from None
        if self.threads < 1:
            raise ValueError(f"number of threads must be positive, got {self.threads}")
        if self.parts > self.warehouses:
            raise ValueError(
                f"number warehouses {self.warehouses} must >= partition {self.parts}"
            )
        if not self.weight:
            self.weight = list(DEFAULT_WEIGHTS)
        elif len(self.weight) != 5:
            raise ValueError(f"Should specify exact 5 weights: {list(self.weight)}")
        elif sum(self.weight) != 100:
            raise ValueError(f"The sum of weight should be 100: {list(self.weight)}")
        else:
            self.weight = list(self.weight)


class _Transaction:
    """Handle yielded by :meth:`ThreadState.transaction`."""

    def __init__(self) -> None:
        self.rolled_back = False

    def rollback(self) -> None:
        """Discard the transaction's work when the block ends."""
        self.rolled_back = True


class ThreadState:
    """A worker thread's connection, random source and transaction deck.

    ``connect`` is a callable returning a DB-API connection. Queries are
    written with ``?`` placeholders; they are rewritten to ``$n`` for the
    postgres driver, or to ``%s`` when ``paramstyle`` is ``"format"``.
    """

    def __init__(
        self,
        connect: Optional[Connector] = None,
        rng: Optional[random.Random] = None,
        driver: str = "mysql",
        paramstyle: str = "qmark",
    ) -> None:
        if paramstyle not in ("qmark", "format"):
            raise ValueError(f"unsupported paramstyle {paramstyle!r}")
        self._connect = connect
        self.rng = rng if rng is not None else random.Random()
        self.driver = driver
        self.paramstyle = paramstyle
        self.conn = connect() if connect is not None else None
        self.index = 0
        self.decks: list[int] = []
        self.last_conn_refresh = time.monotonic()

    def _sql(self, query: str) -> str:
        query = convert_to_pq(query, self.driver)
        if self.paramstyle == "format":
            query = query.replace("%", "%%").replace("?", "%s")
        return query

    def _require(self) -> Any:
        if self.conn is None:
            raise RuntimeError("no database connection")
        return self.conn

    @contextmanager
    def _cursor(self, query: str, params: Sequence[Any]) -> Iterator[Any]:
        cursor = self._require().cursor()
        try:
            cursor.execute(self._sql(query), tuple(params))
            yield cursor
        finally:
            cursor.close()

    def execute(self, query: str, params: Sequence[Any] = ()) -> int:
        """Run a statement and return the number of rows it affected."""
        with self._cursor(query, params) as cursor:
            return cursor.rowcount

    def query(self, query: str, params: Sequence[Any] = ()) -> list[tuple]:
        """Run a query and return all of its rows."""
        with self._cursor(query, params) as cursor:
            return [tuple(row) for row in cursor.fetchall()]

    def query_one(self, query: str, params: Sequence[Any] = ()) -> tuple:
        """Run a query and return its first row; raise NoRowsError if empty."""
        with self._cursor(query, params) as cursor:
            row = cursor.fetchone()
        if row is None:
            raise NoRowsError(f"no rows returned by {query}")
        return tuple(row)

    @contextmanager
    def transaction(self) -> Iterator[_Transaction]:
        """Commit on a clean exit; roll back on an error or on request."""
        conn = self._require()
        tx = _Transaction()
        try:
            yield tx
        except BaseException:
            conn.rollback()
            raise
        if tx.rolled_back:
            conn.rollback()
        else:
            conn.commit()

    def refresh_connection(self) -> None:
        """Replace the connection with a fresh one."""
        if self._connect is None:
            raise RuntimeError("no connector to refresh the connection with")
        if self.conn is not None:
            with contextlib.suppress(Exception):
                self.conn.close()
        self.conn = self._connect()
        self.last_conn_refresh = time.monotonic()

    def close(self) -> None:
        """Close the connection if one is open."""
        if self.conn is not None:
            conn, self.conn = self.conn, None
            conn.close()

    def __enter__(self) -> "ThreadState":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()