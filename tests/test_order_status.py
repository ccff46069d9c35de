import random

import pytest

from tpccbench.config import Config, NoRowsError, ThreadState
from tpccbench.order_status import (
    ORDER_STATUS_SELECT_CUSTOMER_BY_ID,
    ORDER_STATUS_SELECT_CUSTOMER_BY_LAST,
    ORDER_STATUS_SELECT_CUSTOMER_CNT_BY_LAST,
    ORDER_STATUS_SELECT_LATEST_ORDER,
    ORDER_STATUS_SELECT_ORDER_LINE,
    run_order_status,
)
from tpccbench.rand import C_LAST_TOKENS


class PathRandom(random.Random):
    """Random source whose by-name/by-id decision is fixed."""

    def __init__(self, decision, seed=7):
        super().__init__(seed)
        self.decision = decision

    def randrange(self, start, stop=None, step=1):
        if stop is None and start == 100:
            return self.decision
        return super().randrange(start, stop, step)


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rows = []
        self.rowcount = 0

    def execute(self, sql, params):
        self.conn.executed.append((sql, params))
        self.rows = list(self.conn.responses.get(sql, []))

    def fetchall(self):
        return self.rows

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def close(self):
        pass


class FakeConnection:
    def __init__(self, responses):
        self.responses = responses
        self.executed = []
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        pass


LINES = [(11, 1, 5, 0.0, "2024-01-01 00:00:00"), (12, 1, 5, 0.0, "2024-01-01 00:00:00")]


def make(responses, decision):
    conn = FakeConnection(responses)
    state = ThreadState(connect=lambda: conn, rng=PathRandom(decision))
    return state, conn


def test_by_id_reports_customer_and_lines():
    responses = {
        ORDER_STATUS_SELECT_CUSTOMER_BY_ID: [(-10.0, "Ann", "OE", "BARBARBAR")],
        ORDER_STATUS_SELECT_LATEST_ORDER: [(42, 3, "2024-01-01 00:00:00")],
        ORDER_STATUS_SELECT_ORDER_LINE: LINES,
    }
    state, conn = make(responses, 99)
    result = run_order_status(state, Config(warehouses=2))

    assert 1 <= result.c_id <= 3000
    assert 1 <= result.w_id <= 2
    assert 1 <= result.d_id <= 10
    assert result.c_last == "BARBARBAR"
    assert result.c_first == "Ann"
    assert result.c_balance == -10.0
    assert result.o_id == 42
    assert result.o_carrier_id == 3
    assert [line.i_id for line in result.lines] == [11, 12]
    assert conn.executed[-1] == (
        ORDER_STATUS_SELECT_ORDER_LINE,
        (result.w_id, result.d_id, 42),
    )
    assert conn.commits == 1
    assert conn.rollbacks == 0


def test_by_name_picks_middle_customer():
    rows = [
        (1.0, "A", "OE", 7),
        (2.0, "B", "OE", 8),
        (3.0, "C", "OE", 9),
    ]
    responses = {
        ORDER_STATUS_SELECT_CUSTOMER_CNT_BY_LAST: [(3,)],
        ORDER_STATUS_SELECT_CUSTOMER_BY_LAST: rows,
        ORDER_STATUS_SELECT_LATEST_ORDER: [(5, None, "2024-01-01 00:00:00")],
        ORDER_STATUS_SELECT_ORDER_LINE: [],
    }
    state, conn = make(responses, 0)
    result = run_order_status(state, Config(warehouses=1))

    assert result.c_id == 8
    assert result.c_first == "B"
    assert result.c_balance == 2.0
    assert result.o_carrier_id is None
    assert result.lines == []
    assert len(result.c_last) >= 9
    assert result.c_last.startswith(C_LAST_TOKENS)
    queried = [sql for sql, _ in conn.executed]
    assert ORDER_STATUS_SELECT_CUSTOMER_BY_ID not in queried
    latest = [p for sql, p in conn.executed if sql == ORDER_STATUS_SELECT_LATEST_ORDER]
    assert latest == [(1, result.d_id, 8)]


def test_by_name_even_count_takes_half():
    rows = [(float(i), f"F{i}", "OE", 100 + i) for i in range(4)]
    responses = {
        ORDER_STATUS_SELECT_CUSTOMER_CNT_BY_LAST: [(4,)],
        ORDER_STATUS_SELECT_CUSTOMER_BY_LAST: rows,
        ORDER_STATUS_SELECT_LATEST_ORDER: [(1, 1, "2024-01-01 00:00:00")],
        ORDER_STATUS_SELECT_ORDER_LINE: [],
    }
    state, _ = make(responses, 10)
    result = run_order_status(state, Config(warehouses=1))
    assert result.c_id == rows[1][3]


def test_missing_order_rolls_back():
    responses = {
        ORDER_STATUS_SELECT_CUSTOMER_BY_ID: [(0.0, "Ann", "OE", "BARBARBAR")],
    }
    state, conn = make(responses, 60)
    with pytest.raises(NoRowsError):
        run_order_status(state, Config(warehouses=1))
    assert conn.commits == 0
    assert conn.rollbacks == 1


def test_missing_customer_by_id_raises():
    state, conn = make({}, 75)
    with pytest.raises(NoRowsError):
        run_order_status(state, Config(warehouses=1))
    assert len(conn.executed) == 1
    assert conn.executed[0][0] == ORDER_STATUS_SELECT_CUSTOMER_BY_ID