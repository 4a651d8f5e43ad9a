"""Input validation for the sales forecasting pipeline."""

from .input_parser import MIN_HISTORY, SalesInputParser, parse_sales_input

__all__ = [
    "MIN_HISTORY",
    "SalesInputParser",
    "parse_sales_input",
]
