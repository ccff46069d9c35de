"""The Order-Status transaction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from tpccbench.config import DISTRICT_PER_WAREHOUSE, Config, ThreadState
from tpccbench.rand import rand_c_last, rand_customer_id, rand_int

ORDER_STATUS_SELECT_CUSTOMER_CNT_BY_LAST = (
    "SELECT count(c_id) namecnt FROM customer WHERE c_w_id = ? AND c_d_id = ? AND c_last = ?"
)
ORDER_STATUS_SELECT_CUSTOMER_BY_LAST = (
    "SELECT c_balance, c_first, c_middle, c_id FROM customer "
    "WHERE c_w_id = ? AND c_d_id = ? AND c_last = ? ORDER BY c_first"
)
ORDER_STATUS_SELECT_CUSTOMER_BY_ID = (
    "SELECT c_balance, c_first, c_middle, c_last FROM customer "
    "WHERE c_w_id = ? AND c_d_id = ? AND c_id = ?"
)
ORDER_STATUS_SELECT_LATEST_ORDER = (
    "SELECT o_id, o_carrier_id, o_entry_d FROM orders "
    "WHERE o_w_id = ? AND o_d_id = ? AND o_c_id = ? ORDER BY o_id DESC LIMIT 1"
)
ORDER_STATUS_SELECT_ORDER_LINE = (
    "SELECT ol_i_id, ol_supply_w_id, ol_quantity, ol_amount, ol_delivery_d "
    "FROM order_line WHERE ol_w_id = ? AND ol_d_id = ? AND ol_o_id = ?"
)


@dataclass
class OrderLine:
    """One line of the order reported by Order-Status."""

    i_id: int
    supply_w_id: int
    quantity: int
    amount: float
    delivery_d: Optional[Any]


@dataclass
class OrderStatus:
    """What Order-Status reports about a customer's latest order."""

    w_id: int
    d_id: int
    c_id: int = 0
    c_last: str = ""
    c_balance: float = 0.0
    c_first: str = ""
    c_middle: str = ""
    o_id: int = 0
    o_entry_d: Any = None
    o_carrier_id: Optional[int] = None
    lines: list[OrderLine] = field(default_factory=list)


def run_order_status(state: ThreadState, config: Config) -> OrderStatus:
    """Look up a customer (60% by last name) and report its latest order."""
    rng = state.rng
    status = OrderStatus(
        w_id=rand_int(rng, 1, config.warehouses),
        d_id=rand_int(rng, 1, DISTRICT_PER_WAREHOUSE),
    )
    # spec 2.6.1.2
    if rng.randrange(100) < 60:
        status.c_last = rand_c_last(rng)
    else:
        status.c_id = rand_customer_id(rng)

    with state.transaction():
        if status.c_id == 0:
            (name_count,) = state.query_one(
                ORDER_STATUS_SELECT_CUSTOMER_CNT_BY_LAST,
                (status.w_id, status.d_id, status.c_last),
            )
            name_count = int(name_count)
            if name_count % 2 == 1:
                name_count += 1
            rows = state.query(
                ORDER_STATUS_SELECT_CUSTOMER_BY_LAST,
                (status.w_id, status.d_id, status.c_last),
            )
            # the customer at position ceil(n / 2) in first-name order
            for balance, first, middle, c_id in rows[: name_count // 2]:
                status.c_balance = float(balance)
                status.c_first = first
                status.c_middle = middle
                status.c_id = int(c_id)
        else:
            balance, first, middle, last = state.query_one(
                ORDER_STATUS_SELECT_CUSTOMER_BY_ID,
                (status.w_id, status.d_id, status.c_id),
            )
            status.c_balance = float(balance)
            status.c_first = first
            status.c_middle = middle
            status.c_last = last

        # spec 2.6.2.2: the customer's latest order
        o_id, carrier_id, entry_d = state.query_one(
            ORDER_STATUS_SELECT_LATEST_ORDER, (status.w_id, status.d_id, status.c_id)
        )
        status.o_id = int(o_id)
        status.o_carrier_id = None if carrier_id is None else int(carrier_id)
        status.o_entry_d = entry_d

        status.lines = [
            OrderLine(
                i_id=int(i_id),
                supply_w_id=int(supply_w_id),
                quantity=int(quantity),
                amount=float(amount),
                delivery_d=delivery_d,
            )
            for i_id, supply_w_id, quantity, amount, delivery_d in state.query(
                ORDER_STATUS_SELECT_ORDER_LINE, (status.w_id, status.d_id, status.o_id)
            )
        ]
    return status