import random
import sqlite3

import pytest

from tpccbench.config import Config, NoRowsError, ThreadState
from tpccbench.stock_level import run_stock_level

SCHEMA = [
    "CREATE TABLE district (d_id INT, d_w_id INT, d_next_o_id INT)",
    "CREATE TABLE order_line (ol_o_id INT, ol_d_id INT, ol_w_id INT, ol_i_id INT)",
    "CREATE TABLE stock (s_i_id INT, s_w_id INT, s_quantity INT)",
]


def _make_db(path, order_ids, low_items, high_items, with_districts=True):
    with sqlite3.connect(path) as conn:
        for stmt in SCHEMA:
            conn.execute(stmt)
        if with_districts:
            conn.executemany(
                "INSERT INTO district VALUES (?, 1, 3001)", [(d,) for d in range(1, 11)]
            )
        items = list(low_items) + list(high_items)
        conn.executemany(
            "INSERT INTO order_line VALUES (?, ?, 1, ?)",
            [(o, d, i) for d in range(1, 11) for o in order_ids for i in items],
        )
        conn.executemany("INSERT INTO stock VALUES (?, 1, 5)", [(i,) for i in low_items])
        conn.executemany("INSERT INTO stock VALUES (?, 1, 50)", [(i,) for i in high_items])


def _state(path, seed=3):
    return ThreadState(connect=lambda: sqlite3.connect(path), rng=random.Random(seed))


def test_counts_low_stock_items(tmp_path):
    path = tmp_path / "db.sqlite"
    _make_db(path, range(2990, 3000), [1, 2, 3, 4, 5], [6, 7])
    with _state(path) as state:
        for _ in range(5):
            assert run_stock_level(state, Config(warehouses=1)) == 5


def test_old_orders_ignored(tmp_path):
    path = tmp_path / "db.sqlite"
    _make_db(path, range(100, 110), [1, 2, 3], [])
    with _state(path) as state:
        assert run_stock_level(state, Config(warehouses=1)) == 0


def test_missing_district_raises(tmp_path):
    path = tmp_path / "db.sqlite"
    _make_db(path, [2999], [1], [], with_districts=False)
    with _state(path) as state:
        with pytest.raises(NoRowsError):
            run_stock_level(state, Config(warehouses=1))