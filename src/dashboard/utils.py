# src/dashboard/utils.py

import logging
import time
from typing import Callable, Optional

# -------------------------------
# Logger Function
# -------------------------------
def get_ui_logger(name: Optional[str] = "dashboard") -> logging.Logger:
    """
    Returns a configured logger for the dashboard module.

    Args:
        name (str): Logger name. Defaults to 'dashboard'.

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    if not logger.hasHandlers():
        logger.setLevel(logging.INFO)
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        ch = logging.StreamHandler()
        ch.setLevel(logging.INFO)
        ch.setFormatter(formatter)
        logger.addHandler(ch)
        logger.propagate = False
    return logger

# -------------------------------
# Helper Functions
# -------------------------------
def format_currency(value: float, symbol: str = "$") -> str:
    """
    Format a sales figure with a currency symbol and thousands separators.

    Whole numbers are shown without decimals; other values keep up to
    three decimal places with trailing zeros removed.

    Examples:
        1234567 -> "$1,234,567"
        1234.5  -> "$1,234.5"
        -42     -> "-$42"
    """
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    if float(magnitude).is_integer():
        body = f"{int(magnitude):,}"
    else:
        body = f"{magnitude:,.3f}".rstrip("0").rstrip(".")
    return f"{sign}{symbol}{body}"


class _CompletedReveal:
    """Handle for a reveal that already ran; cancelling is a no-op."""

    def cancel(self) -> None:
        pass


def blocking_scheduler(delay: float, callback: Callable[[], None]) -> _CompletedReveal:
    """
    Sleep for ``delay`` seconds then run ``callback`` in the calling thread.

    Streamlit only updates placeholders from the script thread, so the
    staged reveal runs inline while the historical chart is already shown.
    """
    time.sleep(delay)
    callback()
    return _CompletedReveal()

# -------------------------------
# Dashboard Constants
# -------------------------------
CHART_HEIGHT = 500
HISTORICAL_COLOR = "#4f46e5"
PREDICTED_COLOR = "#ef4444"
TICK_INTERVAL = 14
