"""The Stock-Level transaction."""

from __future__ import annotations

from tpccbench.config import DISTRICT_PER_WAREHOUSE, Config, ThreadState
from tpccbench.rand import rand_int

STOCK_LEVEL_COUNT = (
    "SELECT /*+ TIDB_INLJ(order_line,stock) */ COUNT(DISTINCT (s_i_id)) stock_count "
    "FROM order_line, stock \n"
    "WHERE ol_w_id = ? AND ol_d_id = ? AND ol_o_id < ? AND ol_o_id >= ? - 20 "
    "AND s_w_id = ? AND s_i_id = ol_i_id AND s_quantity < ?"
)
STOCK_LEVEL_SELECT_DISTRICT = "SELECT d_next_o_id FROM district WHERE d_w_id = ? AND d_id = ?"


def run_stock_level(state: ThreadState, config: Config) -> int:
    """Count recently ordered items whose stock is below a random threshold."""
    with state.transaction():
        w_id = rand_int(state.rng, 1, config.warehouses)
        d_id = rand_int(state.rng, 1, DISTRICT_PER_WAREHOUSE)
        threshold = rand_int(state.rng, 10, 20)

        (o_id,) = state.query_one(STOCK_LEVEL_SELECT_DISTRICT, (w_id, d_id))
        (stock_count,) = state.query_one(
            STOCK_LEVEL_COUNT, (w_id, d_id, o_id, o_id, w_id, threshold)
        )
    return stock_count