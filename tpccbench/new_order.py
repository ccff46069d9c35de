"""The New-Order transaction."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Optional

from tpccbench.config import DISTRICT_PER_WAREHOUSE, TIME_FORMAT, Config, ThreadState
from tpccbench.rand import rand_customer_id, rand_int, rand_item_id

NEW_ORDER_SELECT_CUSTOMER = (
    "SELECT c_discount, c_last, c_credit, w_tax FROM customer, warehouse "
    "WHERE w_id = ? AND c_w_id = w_id AND c_d_id = ? AND c_id = ?"
)
NEW_ORDER_SELECT_DISTRICT = (
    "SELECT d_next_o_id, d_tax FROM district WHERE d_id = ? AND d_w_id = ? FOR UPDATE"
)
NEW_ORDER_UPDATE_DISTRICT = (
    "UPDATE district SET d_next_o_id = ? + 1 WHERE d_id = ? AND d_w_id = ?"
)
NEW_ORDER_INSERT_ORDER = (
    "INSERT INTO orders (o_id, o_d_id, o_w_id, o_c_id, o_entry_d, o_ol_cnt, o_all_local) "
    "VALUES (?, ?, ?, ?, ?, ?, ?)"
)
NEW_ORDER_INSERT_NEW_ORDER = (
    "INSERT INTO new_order (no_o_id, no_d_id, no_w_id) VALUES (?, ?, ?)"
)
NEW_ORDER_UPDATE_STOCK = (
    "UPDATE stock SET s_quantity = ?, s_ytd = s_ytd + ?, s_order_cnt = s_order_cnt + 1, "
    "s_remote_cnt = s_remote_cnt + ? WHERE s_i_id = ? AND s_w_id = ?"
)

MIN_ORDER_LINES = 5
MAX_ORDER_LINES = 15


class NewOrderError(RuntimeError):
    """The New-Order transaction found the database in an unexpected state."""


def select_items_sql(count: int) -> str:
    """SELECT of ``count`` items by id."""
    marks = ",".join("?" * count)
    return f"SELECT i_price, i_name, i_data, i_id FROM item WHERE i_id IN ({marks})"


def select_stock_sql(count: int) -> str:
    """SELECT ... FOR UPDATE of ``count`` stock rows by (warehouse, item)."""
    pairs = ",".join(["(?,?)"] * count)
    return (
        "SELECT s_i_id, s_quantity, s_data, s_dist_01, s_dist_02, s_dist_03, s_dist_04, "
        "s_dist_05, s_dist_06, s_dist_07, s_dist_08, s_dist_09, s_dist_10 FROM stock "
        f"WHERE (s_w_id, s_i_id) IN ({pairs}) FOR UPDATE"
    )


def insert_order_line_sql(count: int) -> str:
    """Multi-row INSERT of ``count`` order lines."""
    rows = ",".join(["(?,?,?,?,?,?,?,?,?)"] * count)
    return (
        "INSERT into order_line (ol_o_id, ol_d_id, ol_w_id, ol_number, ol_i_id, "
        f"ol_supply_w_id, ol_quantity, ol_amount, ol_dist_info) VALUES {rows}"
    )


def other_warehouse(rng: random.Random, warehouses: int, warehouse: int) -> int:
    """A random warehouse other than ``warehouse``, or it itself if it is the only one."""
    if warehouses == 1:
        return warehouse
    while True:
        other = rand_int(rng, 1, warehouses)
        if other != warehouse:
            return other


@dataclass
class OrderItem:
    """One line of a new order."""

    ol_number: int
    i_id: int
    supply_w_id: int = 0
    quantity: int = 0
    amount: float = 0.0
    remote: int = 0
    price: float = 0.0
    name: str = ""
    data: str = ""
    s_quantity: int = 0
    s_dist: str = ""
    found_in_items: bool = False
    found_in_stock: bool = False


@dataclass
class NewOrderResult:
    """The order entered by a committed New-Order transaction."""

    w_id: int
    d_id: int
    c_id: int
    o_id: int
    all_local: int
    c_discount: float
    c_last: str
    w_tax: float
    d_tax: float
    items: list[OrderItem] = field(default_factory=list)


def _pick_items(
    rng: random.Random, config: Config, w_id: int, count: int, rollback: bool
) -> tuple[list[OrderItem], int]:
    items: list[OrderItem] = []
    used: set[int] = set()
    all_local = 1
    for number in range(1, count + 1):
        if number == count and rollback:
            i_id = -1
        else:
            i_id = rand_item_id(rng)
            while i_id in used:
                i_id = rand_item_id(rng)
            used.add(i_id)
        item = OrderItem(ol_number=number, i_id=i_id)
        if config.warehouses == 1 or rand_int(rng, 1, 100) != 1:
            item.supply_w_id = w_id
        else:
            item.supply_w_id = other_warehouse(rng, config.warehouses, w_id)
            item.remote = 1
            all_local = 0
        item.quantity = rand_int(rng, 1, 10)
        items.append(item)
    return items, all_local


def run_new_order(state: ThreadState, config: Config) -> Optional[NewOrderResult]:
    """Enter a new order of 5 to 15 items (spec 2.4).

    One order in a hundred names an unused item and is rolled back; for
    those None is returned.
    """
    rng = state.rng
    w_id = rand_int(rng, 1, config.warehouses)
    d_id = rand_int(rng, 1, DISTRICT_PER_WAREHOUSE)
    c_id = rand_customer_id(rng)
    ol_count = rand_int(rng, MIN_ORDER_LINES, MAX_ORDER_LINES)
    rollback = rand_int(rng, 1, 100) == 1

    items, all_local = _pick_items(rng, config, w_id, ol_count, rollback)
    by_id = {item.i_id: item for item in items}

    with state.transaction() as tx:
        c_discount, c_last, _c_credit, w_tax = state.query_one(
            NEW_ORDER_SELECT_CUSTOMER, (w_id, d_id, c_id)
        )
        d_next_o_id, d_tax = state.query_one(NEW_ORDER_SELECT_DISTRICT, (d_id, w_id))
        o_id = int(d_next_o_id)
        c_discount, w_tax, d_tax = float(c_discount), float(w_tax), float(d_tax)

        state.execute(NEW_ORDER_UPDATE_DISTRICT, (o_id, d_id, w_id))
        state.execute(
            NEW_ORDER_INSERT_ORDER,
            (o_id, d_id, w_id, c_id, time.strftime(TIME_FORMAT), ol_count, all_local),
        )
        state.execute(NEW_ORDER_INSERT_NEW_ORDER, (o_id, d_id, w_id))

        for price, name, data, i_id in state.query(
            select_items_sql(len(items)), [item.i_id for item in items]
        ):
            item = by_id[int(i_id)]
            item.price = float(price)
            item.name = name
            item.data = data
            item.found_in_items = True
        for item in items:
            if not item.found_in_items:
                if item.i_id == -1:
                    tx.rollback()
                    return None
                raise NewOrderError(f"item {item.i_id} not found")

        stock_args = [value for item in items for value in (w_id, item.i_id)]
        for i_id, quantity, _data, *dists in state.query(
            select_stock_sql(len(items)), stock_args
        ):
            item = by_id[int(i_id)]
            quantity = int(quantity) - item.quantity
            if quantity < 10:
                quantity += 91
            item.found_in_stock = True
            item.s_quantity = quantity
            item.s_dist = dists[d_id - 1]
            item.amount = (
                item.quantity * item.price * (1 + w_tax + d_tax) * (1 - c_discount)
            )

        for item in items:
            if not item.found_in_stock:
                raise NewOrderError(f"item ({w_id}, {item.i_id}) not found in stock")
            state.execute(
                NEW_ORDER_UPDATE_STOCK,
                (item.s_quantity, item.quantity, item.remote, item.i_id, w_id),
            )

        line_args = [
            value
            for item in items
            for value in (
                o_id,
                d_id,
                w_id,
                item.ol_number,
                item.i_id,
                item.supply_w_id,
                item.quantity,
                item.amount,
                item.s_dist,
            )
        ]
        state.execute(insert_order_line_sql(len(items)), line_args)

    return NewOrderResult(
        w_id=w_id,
        d_id=d_id,
        c_id=c_id,
        o_id=o_id,
        all_local=all_local,
        c_discount=c_discount,
        c_last=c_last,
        w_tax=w_tax,
        d_tax=d_tax,
        items=items,
    )