"""Initial population of the TPC-C tables."""

from __future__ import annotations

import time
from typing import Any, Optional, Protocol, Sequence

from tpccbench.config import DISTRICT_PER_WAREHOUSE, TIME_FORMAT, Config, ThreadState
from tpccbench.rand import (
    rand_c_last,
    rand_c_last_syllables,
    rand_chars,
    rand_int,
    rand_letters,
    rand_numbers,
    rand_original_string,
    rand_state,
    rand_tax,
    rand_zip,
)

MAX_ITEMS = 100_000
STOCK_PER_WAREHOUSE = 100_000
CUSTOMER_PER_DISTRICT = 3000
ORDER_PER_DISTRICT = 3000
NEW_ORDER_PER_DISTRICT = 900
DEFAULT_BATCH_SIZE = 100

ITEM_INSERT = "INSERT INTO item (i_id, i_im_id, i_name, i_price, i_data) VALUES "
WAREHOUSE_INSERT = (
    "INSERT INTO warehouse (w_id, w_name, w_street_1, w_street_2, w_city, w_state, "
    "w_zip, w_tax, w_ytd) VALUES "
)
STOCK_INSERT = """INSERT INTO stock (s_i_id, s_w_id, s_quantity, 
s_dist_01, s_dist_02, s_dist_03, s_dist_04, s_dist_05, s_dist_06, 
s_dist_07, s_dist_08, s_dist_09, s_dist_10, s_ytd, s_order_cnt, s_remote_cnt, s_data) VALUES """
DISTRICT_INSERT = """INSERT INTO district (d_id, d_w_id, d_name, d_street_1, d_street_2, 
d_city, d_state, d_zip, d_tax, d_ytd, d_next_o_id) VALUES """
CUSTOMER_INSERT = """INSERT INTO customer (c_id, c_d_id, c_w_id, c_first, c_middle, c_last, 
c_street_1, c_street_2, c_city, c_state, c_zip, c_phone, c_since, c_credit, c_credit_lim,
c_discount, c_balance, c_ytd_payment, c_payment_cnt, c_delivery_cnt, c_data) VALUES """
HISTORY_INSERT = (
    "INSERT INTO history (h_c_id, h_c_d_id, h_c_w_id, h_d_id, h_w_id, h_date, "
    "h_amount, h_data) VALUES "
)
ORDERS_INSERT = """INSERT INTO orders (o_id, o_d_id, o_w_id, o_c_id, o_entry_d, 
o_carrier_id, o_ol_cnt, o_all_local) VALUES """
NEW_ORDER_INSERT = "INSERT INTO new_order (no_o_id, no_d_id, no_w_id) VALUES "
ORDER_LINE_INSERT = """INSERT INTO order_line (ol_o_id, ol_d_id, ol_w_id, ol_number,
ol_i_id, ol_supply_w_id, ol_delivery_d, ol_quantity, ol_amount, ol_dist_info) VALUES """


class LoadError(RuntimeError):
    """Loading one part of the initial data failed."""


class BatchInsert:
    """Collects rows and writes them as multi-row INSERT statements.

    Each batch is written in its own transaction and retried up to
    ``retry_count`` more times, ``retry_interval`` seconds apart.
    """

    def __init__(
        self,
        state: ThreadState,
        hint: str,
        retry_count: int = 0,
        retry_interval: float = 0.0,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch size must be positive, got {batch_size}")
        if retry_count < 0:
            raise ValueError(f"retry count must not be negative, got {retry_count}")
        self.state = state
        self.hint = hint
        self.retry_count = retry_count
        self.retry_interval = retry_interval
        self.batch_size = batch_size
        self._rows: list[tuple] = []
        self._width: Optional[int] = None

    def write_row(self, *args: Any) -> None:
        """Queue one row; write the batch once it is full."""
        if not args:
            raise ValueError("a row needs at least one value")
        if self._width is None:
            self._width = len(args)
        elif len(args) != self._width:
            raise ValueError(f"row has {len(args)} values, expected {self._width}")
        self._rows.append(args)
        if len(self._rows) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        """Write every queued row."""
        if not self._rows:
            return
        rows, self._rows = self._rows, []
        placeholder = "(" + ",".join("?" * len(rows[0])) + ")"
        query = self.hint + ",".join([placeholder] * len(rows))
        params = [value for row in rows for value in row]
        for attempt in range(self.retry_count + 1):
            try:
                with self.state.transaction():
                    self.state.execute(query, params)
                return
            except Exception:
                if attempt == self.retry_count:
                    raise
                time.sleep(self.retry_interval)


class Loader(Protocol):
    """What :func:`prepare_workload` needs to fill the tables."""

    def load_item(self, state: ThreadState) -> None: ...

    def load_warehouse(self, state: ThreadState, warehouse: int) -> None: ...

    def load_stock(self, state: ThreadState, warehouse: int) -> None: ...

    def load_district(self, state: ThreadState, warehouse: int) -> None: ...

    def load_customer(self, state: ThreadState, warehouse: int, district: int) -> None: ...

    def load_history(self, state: ThreadState, warehouse: int, district: int) -> None: ...

    def load_order(self, state: ThreadState, warehouse: int, district: int) -> list[int]: ...

    def load_new_order(self, state: ThreadState, warehouse: int, district: int) -> None: ...

    def load_order_line(
        self, state: ThreadState, warehouse: int, district: int, ol_counts: Sequence[int]
    ) -> None: ...


class SQLLoader:
    """Generates the initial TPC-C data and inserts it through a thread's connection."""

    def __init__(
        self,
        config: Config,
        init_load_time: Optional[str] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.config = config
        self.init_load_time = (
            init_load_time if init_load_time is not None else time.strftime(TIME_FORMAT)
        )
        self.batch_size = batch_size

    def _sink(self, state: ThreadState, hint: str) -> BatchInsert:
        return BatchInsert(
            state,
            hint,
            self.config.prepare_retry_count,
            self.config.prepare_retry_interval,
            self.batch_size,
        )

    def load_item(self, state: ThreadState) -> None:
        """Insert the 100,000 rows of the item table."""
        print("load to item")
        rng = state.rng
        sink = self._sink(state, ITEM_INSERT)
        for i_id in range(1, MAX_ITEMS + 1):
            im_id = rand_int(rng, 1, 10000)
            price = rand_int(rng, 100, 10000) / 100.0
            name = rand_chars(rng, 14, 24)
            data = rand_original_string(rng)
            sink.write_row(i_id, im_id, name, price, data)
        sink.flush()

    def load_warehouse(self, state: ThreadState, warehouse: int) -> None:
        """Insert the warehouse row."""
        print(f"load to warehouse in warehouse {warehouse}")
        rng = state.rng
        sink = self._sink(state, WAREHOUSE_INSERT)
        name = rand_chars(rng, 6, 10)
        street_1 = rand_chars(rng, 10, 20)
        street_2 = rand_chars(rng, 10, 20)
        city = rand_chars(rng, 10, 20)
        region = rand_state(rng)
        zip_code = rand_zip(rng)
        tax = rand_tax(rng)
        sink.write_row(
            warehouse, name, street_1, street_2, city, region, zip_code, tax, 300000.00
        )
        sink.flush()

    def load_stock(self, state: ThreadState, warehouse: int) -> None:
        """Insert the 100,000 stock rows of a warehouse."""
        print(f"load to stock in warehouse {warehouse}")
        rng = state.rng
        sink = self._sink(state, STOCK_INSERT)
        for i_id in range(1, STOCK_PER_WAREHOUSE + 1):
            quantity = rand_int(rng, 10, 100)
            dists = [rand_letters(rng, 24, 24) for _ in range(10)]
            data = rand_original_string(rng)
            sink.write_row(i_id, warehouse, quantity, *dists, 0, 0, 0, data)
        sink.flush()

    def load_district(self, state: ThreadState, warehouse: int) -> None:
        """Insert the ten district rows of a warehouse."""
        print(f"load to district in warehouse {warehouse}")
        rng = state.rng
        sink = self._sink(state, DISTRICT_INSERT)
        for d_id in range(1, DISTRICT_PER_WAREHOUSE + 1):
            name = rand_chars(rng, 6, 10)
            street_1 = rand_chars(rng, 10, 20)
            street_2 = rand_chars(rng, 10, 20)
            city = rand_chars(rng, 10, 20)
            region = rand_state(rng)
            zip_code = rand_zip(rng)
            tax = rand_tax(rng)
            sink.write_row(
                d_id, warehouse, name, street_1, street_2, city, region, zip_code,
                tax, 30000.00, 3001,
            )
        sink.flush()

    def load_customer(self, state: ThreadState, warehouse: int, district: int) -> None:
        """Insert the 3,000 customers of a district."""
        print(f"load to customer in warehouse {warehouse} district {district}")
        rng = state.rng
        sink = self._sink(state, CUSTOMER_INSERT)
        for i in range(CUSTOMER_PER_DISTRICT):
            last = rand_c_last_syllables(i) if i < 1000 else rand_c_last(rng)
            first = rand_chars(rng, 8, 16)
            street_1 = rand_chars(rng, 10, 20)
            street_2 = rand_chars(rng, 10, 20)
            city = rand_chars(rng, 10, 20)
            region = rand_state(rng)
            zip_code = rand_zip(rng)
            phone = rand_numbers(rng, 16, 16)
            credit = "BC" if rng.randrange(10) == 0 else "GC"
            discount = rand_int(rng, 0, 5000) / 10000.0
            data = rand_chars(rng, 300, 500)
            sink.write_row(
                i + 1, district, warehouse, first, "OE", last, street_1, street_2,
                city, region, zip_code, phone, self.init_load_time, credit,
                50000.00, discount, -10.00, 10.00, 1, 0, data,
            )
        sink.flush()

    def load_history(self, state: ThreadState, warehouse: int, district: int) -> None:
        """Insert one history row for each customer of a district."""
        print(f"load to history in warehouse {warehouse} district {district}")
        rng = state.rng
        sink = self._sink(state, HISTORY_INSERT)
        for c_id in range(1, CUSTOMER_PER_DISTRICT + 1):
            data = rand_chars(rng, 12, 24)
            sink.write_row(
                c_id, district, warehouse, district, warehouse,
                self.init_load_time, 10.00, data,
            )
        sink.flush()

    def load_order(self, state: ThreadState, warehouse: int, district: int) -> list[int]:
        """Insert the 3,000 orders of a district; return each order's line count."""
        print(f"load to orders in warehouse {warehouse} district {district}")
        rng = state.rng
        sink = self._sink(state, ORDERS_INSERT)
        customer_ids = list(range(1, ORDER_PER_DISTRICT + 1))
        rng.shuffle(customer_ids)
        ol_counts = []
        for o_id, c_id in enumerate(customer_ids, start=1):
            carrier_id = rand_int(rng, 1, 10) if o_id < 2101 else None
            ol_count = rand_int(rng, 5, 15)
            ol_counts.append(ol_count)
            sink.write_row(
                o_id, district, warehouse, c_id, self.init_load_time,
                carrier_id, ol_count, 1,
            )
        sink.flush()
        return ol_counts

    def load_new_order(self, state: ThreadState, warehouse: int, district: int) -> None:
        """Insert the 900 outstanding new orders of a district."""
        print(f"load to new_order in warehouse {warehouse} district {district}")
        sink = self._sink(state, NEW_ORDER_INSERT)
        first = ORDER_PER_DISTRICT - NEW_ORDER_PER_DISTRICT + 1
        for o_id in range(first, first + NEW_ORDER_PER_DISTRICT):
            sink.write_row(o_id, district, warehouse)
        sink.flush()

    def load_order_line(
        self,
        state: ThreadState,
        warehouse: int,
        district: int,
        ol_counts: Sequence[int],
    ) -> None:
        """Insert the order lines of a district, ``ol_counts[i]`` for order i + 1."""
        print(f"load to order_line in warehouse {warehouse} district {district}")
        if len(ol_counts) < ORDER_PER_DISTRICT:
            raise ValueError(
                f"need {ORDER_PER_DISTRICT} order line counts, got {len(ol_counts)}"
            )
        rng = state.rng
        sink = self._sink(state, ORDER_LINE_INSERT)
        for o_id, count in enumerate(ol_counts[:ORDER_PER_DISTRICT], start=1):
            for number in range(1, count + 1):
                i_id = rand_int(rng, 1, 100000)
                if o_id < 2101:
                    delivery_d: Optional[str] = self.init_load_time
                    amount = 0.00
                else:
                    delivery_d = None
                    amount = rand_int(rng, 1, 999999) / 100.0
                dist_info = rand_chars(rng, 24, 24)
                sink.write_row(
                    o_id, district, warehouse, number, i_id, warehouse,
                    delivery_d, 5, amount, dist_info,
                )
        sink.flush()


def prepare_workload(
    loader: Loader, state: ThreadState, threads: int, warehouses: int, thread_id: int
) -> None:
    """Load this thread's share of the initial data.

    Thread 0 loads the items; warehouses and districts are dealt out
    round-robin between the threads.
    """
    if thread_id == 0:
        try:
            loader.load_item(state)
        except Exception as exc:
            raise LoadError(f"load item failed {exc}") from exc

    for i in range(thread_id % threads, warehouses, threads):
        warehouse = i % warehouses + 1
        steps = (
            ("warehouse in", loader.load_warehouse),
            ("stock at warehouse", loader.load_stock),
            ("district at warehouse", loader.load_district),
        )
        for label, step in steps:
            try:
                step(state, warehouse)
            except Exception as exc:
                raise LoadError(f"load {label} {warehouse} failed {exc}") from exc

    districts = warehouses * DISTRICT_PER_WAREHOUSE
    for i in range(thread_id % threads, districts, threads):
        warehouse = (i // DISTRICT_PER_WAREHOUSE) % warehouses + 1
        district = i % DISTRICT_PER_WAREHOUSE + 1
        where = f"at warehouse {warehouse} district {district}"
        try:
            loader.load_customer(state, warehouse, district)
        except Exception as exc:
            raise LoadError(f"load customer {where} failed {exc}") from exc
        try:
            loader.load_history(state, warehouse, district)
        except Exception as exc:
            raise LoadError(f"load history {where} failed {exc}") from exc
        try:
            ol_counts = loader.load_order(state, warehouse, district)
        except Exception as exc:
            raise LoadError(f"load orders {where} failed {exc}") from exc
        try:
            loader.load_new_order(state, warehouse, district)
        except Exception as exc:
            raise LoadError(f"load new_order {where} failed {exc}") from exc
        try:
            loader.load_order_line(state, warehouse, district, ol_counts)
        except Exception as exc:
            raise LoadError(f"load order_line {where} failed {exc}") from exc