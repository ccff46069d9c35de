"""The Payment transaction."""

from __future__ import annotations

import time
from dataclasses import dataclass

from tpccbench.config import DISTRICT_PER_WAREHOUSE, TIME_FORMAT, Config, ThreadState
from tpccbench.new_order import other_warehouse
from tpccbench.rand import rand_c_last, rand_customer_id, rand_int

PAYMENT_UPDATE_DISTRICT = "UPDATE district SET d_ytd = d_ytd + ? WHERE d_w_id = ? AND d_id = ?"
PAYMENT_SELECT_DISTRICT = (
    "SELECT d_street_1, d_street_2, d_city, d_state, d_zip, d_name FROM district "
    "WHERE d_w_id = ? AND d_id = ?"
)
PAYMENT_UPDATE_WAREHOUSE = "UPDATE warehouse SET w_ytd = w_ytd + ? WHERE w_id = ?"
PAYMENT_SELECT_WAREHOUSE = (
    "SELECT w_street_1, w_street_2, w_city, w_state, w_zip, w_name FROM warehouse "
    "WHERE w_id = ?"
)
PAYMENT_SELECT_CUSTOMER_LIST_BY_LAST = (
    "SELECT c_id FROM customer WHERE c_w_id = ? AND c_d_id = ? AND c_last = ? "
    "ORDER BY c_first"
)
PAYMENT_SELECT_CUSTOMER_FOR_UPDATE = (
    "SELECT c_first, c_middle, c_last, c_street_1, c_street_2, c_city, c_state, c_zip, "
    "c_phone,\n"
    "c_credit, c_credit_lim, c_discount, c_balance, c_since FROM customer "
    "WHERE c_w_id = ? AND c_d_id = ? \n"
    "AND c_id = ? FOR UPDATE"
)
PAYMENT_UPDATE_CUSTOMER = (
    "UPDATE customer SET c_balance = c_balance - ?, c_ytd_payment = c_ytd_payment + ?, \n"
    "c_payment_cnt = c_payment_cnt + 1 WHERE c_w_id = ? AND c_d_id = ? AND c_id = ?"
)
PAYMENT_SELECT_CUSTOMER_DATA = (
    "SELECT c_data FROM customer WHERE c_w_id = ? AND c_d_id = ? AND c_id = ?"
)
PAYMENT_UPDATE_CUSTOMER_WITH_DATA = (
    "UPDATE customer SET c_balance = c_balance - ?, c_ytd_payment = c_ytd_payment + ?, \n"
    "c_payment_cnt = c_payment_cnt + 1, c_data = ? "
    "WHERE c_w_id = ? AND c_d_id = ? AND c_id = ?"
)
PAYMENT_INSERT_HISTORY = (
    "INSERT INTO history (h_c_d_id, h_c_w_id, h_c_id, h_d_id, h_w_id, h_date, "
    "h_amount, h_data)\n"
    "VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
)

C_DATA_LENGTH = 500


class PaymentError(RuntimeError):
    """The Payment transaction found the database in an unexpected state."""


def build_customer_data(
    c_id: int,
    c_d_id: int,
    c_w_id: int,
    d_id: int,
    w_id: int,
    amount: float,
    timestamp: str,
    old_data: str,
) -> str:
    """New c_data for a bad-credit customer: payment details, then the old data,
    cut to 500 characters."""
    new_data = (
        f"| {c_id:4d} {c_d_id:2d} {c_w_id:4d} {d_id:2d} {w_id:4d} ${amount:7.2f} "
        f"{timestamp:>12s} {old_data:>24s}"
    )
    if len(new_data) >= C_DATA_LENGTH:
        return new_data[:C_DATA_LENGTH]
    return new_data + old_data[: C_DATA_LENGTH - len(new_data)]


@dataclass
class PaymentResult:
    """What a committed Payment transaction recorded."""

    w_id: int
    d_id: int
    c_w_id: int
    c_d_id: int
    c_id: int
    c_first: str
    c_last: str
    c_credit: str
    c_balance: float
    h_amount: float
    w_name: str
    d_name: str


def run_payment(state: ThreadState, config: Config) -> PaymentResult:
    """Record a customer payment against a warehouse and district (spec 2.5)."""
    rng = state.rng
    w_id = rand_int(rng, 1, config.warehouses)
    d_id = rand_int(rng, 1, DISTRICT_PER_WAREHOUSE)
    h_amount = rand_int(rng, 100, 500000) / 100.0

    # spec 2.5.1.2: 60% by last name, 40% by customer id
    c_id = 0
    c_last = ""
    if rng.randrange(100) < 60:
        c_last = rand_c_last(rng)
    else:
        c_id = rand_customer_id(rng)

    # spec 2.5.1.2: 85% local, 15% remote
    if config.warehouses == 1 or rng.randrange(100) < 85:
        c_w_id, c_d_id = w_id, d_id
    else:
        c_w_id = other_warehouse(rng, config.warehouses, w_id)
        c_d_id = rand_int(rng, 1, DISTRICT_PER_WAREHOUSE)

    with state.transaction():
        state.execute(PAYMENT_UPDATE_DISTRICT, (h_amount, w_id, d_id))
        *_, d_name = state.query_one(PAYMENT_SELECT_DISTRICT, (w_id, d_id))
        state.execute(PAYMENT_UPDATE_WAREHOUSE, (h_amount, w_id))
        *_, w_name = state.query_one(PAYMENT_SELECT_WAREHOUSE, (w_id,))

        if c_id == 0:
            ids = [
                int(row[0])
                for row in state.query(
                    PAYMENT_SELECT_CUSTOMER_LIST_BY_LAST, (c_w_id, c_d_id, c_last)
                )
            ]
            if not ids:
                raise PaymentError(
                    f"customer for ({c_w_id}, {c_d_id}, {c_last}) not found"
                )
            c_id = ids[(len(ids) + 1) // 2 - 1]

        row = state.query_one(PAYMENT_SELECT_CUSTOMER_FOR_UPDATE, (c_w_id, c_d_id, c_id))
        c_first, _middle, c_last = row[0], row[1], row[2]
        c_credit = row[9]
        c_balance = float(row[12])

        if c_credit == "BC":
            (c_data,) = state.query_one(PAYMENT_SELECT_CUSTOMER_DATA, (c_w_id, c_d_id, c_id))
            new_data = build_customer_data(
                c_id, c_d_id, c_w_id, d_id, w_id, h_amount,
                time.strftime(TIME_FORMAT), c_data,
            )
            state.execute(
                PAYMENT_UPDATE_CUSTOMER_WITH_DATA,
                (h_amount, h_amount, new_data, c_w_id, c_d_id, c_id),
            )
        else:
            state.execute(
                PAYMENT_UPDATE_CUSTOMER, (h_amount, h_amount, c_w_id, c_d_id, c_id)
            )

        h_data = f"{w_name:>10}    {d_name:>10}"
        state.execute(
            PAYMENT_INSERT_HISTORY,
            (c_d_id, c_w_id, c_id, d_id, w_id, time.strftime(TIME_FORMAT), h_amount, h_data),
        )

    return PaymentResult(
        w_id=w_id,
        d_id=d_id,
        c_w_id=c_w_id,
        c_d_id=c_d_id,
        c_id=c_id,
        c_first=c_first,
        c_last=c_last,
        c_credit=c_credit,
        c_balance=c_balance,
        h_amount=h_amount,
        w_name=w_name,
        d_name=d_name,
    )