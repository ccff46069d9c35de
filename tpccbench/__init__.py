"""TPC-C data generation, initial loading and the New-Order, Payment,
Order-Status and Stock-Level transactions."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "rand",
    "stock_level",
    "order_status",
    "loader",
    "new_order",
    "payment",
]