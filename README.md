# tpccbench

Building blocks for running TPC-C against a SQL database through any DB-API
connection. It provides:

- the random data generators of the TPC-C specification,
- the initial loading of the TPC-C tables,
- four of the five TPC-C transactions: New-Order, Payment, Order-Status and
  Stock-Level.

All queries are written with `?` placeholders. For the `postgres` driver they are
rewritten to `$1`, `$2`, …. For drivers whose paramstyle is `format`, such as
many MySQL drivers, they are rewritten to `%s`.

It has no dependencies outside the standard library.

## Modules

- `tpccbench.config`
  - `Config` holds the run settings: `driver`, `warehouses`, `threads`, `parts`,
    `partition_type`, `weight`, `prepare_retry_count`, `prepare_retry_interval`
    and more.
  - Creating a `Config` checks the settings and raises `ValueError` in these cases:
    - an unknown partition type;
    - fewer than one thread;
    - more partitions than warehouses;
    - a `weight` that is not five numbers adding up to 100.
  - An empty `weight` gives the default mix 45/43/4/4/4.
  - `PartitionType` is one of `HASH`, `RANGE`, `LIST_AS_HASH` or `LIST_AS_RANGE`.
- `tpccbench.config.ThreadState`
  - Holds one worker's connection, made by a `connect` callable, and its
    `random.Random`.
  - Methods:
    - `execute` returns the affected row count.
    - `query` returns all rows.
    - `query_one` returns the first row, and raises `NoRowsError` when there is none.
    - `transaction()` is a context manager. It commits on a clean exit, rolls back
      on an exception, and also rolls back when `rollback()` is called on the
      handle it yields.
    - `refresh_connection` replaces the connection with a new one.
    - `close` closes the connection.
- `tpccbench.rand`: the generators of the specification.
  - String generators: `rand_chars`, `rand_letters`, `rand_numbers`, `rand_zip`,
    `rand_state` and `rand_original_string`.
  - `rand_tax` gives a tax rate.
  - Customer last names: `rand_c_last_syllables` and `rand_c_last`.
  - Non-uniform ids: `rand_customer_id` and `rand_item_id`.
  - `convert_to_pq` does the placeholder rewriting.
- `tpccbench.loader`
  - `SQLLoader` generates the initial rows for each table. It writes them as
    multi-row `INSERT`s through `BatchInsert`, which retries a failed batch
    `prepare_retry_count` times.
  - `prepare_workload(loader, state, threads, warehouses, thread_id)` loads one
    thread's share:
    - thread 0 loads the items;
    - warehouses and districts are dealt out round-robin between the threads.
  - A failure is raised as `LoadError`.
- The transactions. Each takes `(state, config)` and runs in one database
  transaction.
  - `tpccbench.new_order.run_new_order` returns a `NewOrderResult`. It returns
    `None` for the one order in a hundred that names an unused item and is rolled
    back.
  - `tpccbench.payment.run_payment` returns a `PaymentResult`.
  - `tpccbench.order_status.run_order_status` returns an `OrderStatus` with its
    order lines.
  - `tpccbench.stock_level.run_stock_level` returns the count of low-stock items.

## A short look

```python
from tpccbench.rand import convert_to_pq, rand_c_last_syllables

rand_c_last_syllables(0)      # 'BARBARBAR'
rand_c_last_syllables(371)    # 'PRICALLYOUGHT'
convert_to_pq("SELECT * FROM item WHERE i_id = ? AND i_im_id = ?", "postgres")
# 'SELECT * FROM item WHERE i_id = $1 AND i_im_id = $2'
```

## Loading and running

```python
from tpccbench.config import Config, ThreadState
from tpccbench.loader import SQLLoader, prepare_workload
from tpccbench.new_order import run_new_order
from tpccbench.payment import run_payment

config = Config(driver="mysql", warehouses=1, threads=1)
state = ThreadState(connect=my_connect, driver=config.driver, paramstyle="format")

prepare_workload(SQLLoader(config), state, config.threads, config.warehouses, 0)
result = run_new_order(state, config)
payment = run_payment(state, config)
state.close()
```

Here `my_connect` is your own function that returns a DB-API connection.

## What it does not do

- **No schema.** The package does not create or drop the TPC-C tables. They must
  already exist before loading. `Config.parts`, `partition_type` and `use_fk` are
  only checked, not applied.
- **No Delivery transaction.**
- **No workload driver.** There is nothing that:
  - deals transactions out by their weights,
  - applies keying and thinking times,
  - measures latencies,
  - reports tpmC.
- **No command-line tool.** It is a library only.