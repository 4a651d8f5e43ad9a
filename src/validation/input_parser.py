"""Parse raw comma-separated sales input into a validated numeric sequence."""

import logging
import math
import re
from typing import Tuple

from src.monitoring.error_logging import ErrorComponent, create_component_logger
from src.pipeline.errors import InputValidationError, ValidationReason

logger = logging.getLogger(__name__)
error_logger = create_component_logger(ErrorComponent.INPUT_PARSER)

MIN_HISTORY = 40
INSUFFICIENT_DATA_MESSAGE = "Please provide a minimum of {min_values} values separated by commas."


# Plain decimal with optional exponent; rejects "1_000", hex and non-ASCII digits
_NUMBER_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _to_float(token: str) -> float:
    if not _NUMBER_PATTERN.fullmatch(token):
        raise ValueError(f"not a decimal number: {token}")
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"non-finite value: {token}")
    return value


def parse_sales_input(raw: str, min_values: int = MIN_HISTORY) -> Tuple[float, ...]:
    """Split raw text on commas and convert each trimmed token to a float.

    Args:
        raw: Comma-separated sales values, oldest first.
        min_values: Minimum number of values required.

    Returns:
        Tuple of floats in input order.

    Raises:
        InputValidationError: INSUFFICIENT_DATA when fewer than ``min_values``
            tokens are supplied, MALFORMED_VALUE when a token is not a finite number.
    """
    tokens = [t.strip() for t in raw.split(",")] if raw and raw.strip() else []

    if len(tokens) < min_values:
        error = InputValidationError(
            ValidationReason.INSUFFICIENT_DATA,
            INSUFFICIENT_DATA_MESSAGE.format(min_values=min_values),
        )
        error_logger.log_error(
            "Rejected sales input",
            exception=error,
            context={"values": len(tokens), "minimum": min_values},
            severity="info",
        )
        raise error

    values = []
    for position, token in enumerate(tokens):
        try:
            values.append(_to_float(token))
        except ValueError:
            error = InputValidationError(
                ValidationReason.MALFORMED_VALUE,
                f"Value {position + 1} ({token!r}) is not a number.",
                token=token,
                position=position,
            )
            error_logger.log_error(
                "Rejected sales input",
                exception=error,
                context={"position": position + 1, "token": repr(token)},
                severity="info",
            )
            raise error from None

    logger.debug(f"Parsed {len(values)} sales values")
    return tuple(values)


class SalesInputParser:
    """Parser bound to a configured minimum history length."""

    def __init__(self, min_values: int = MIN_HISTORY):
        if min_values < 1:
            raise ValueError("min_values must be at least 1")
        self.min_values = min_values

    def parse(self, raw: str) -> Tuple[float, ...]:
        return parse_sales_input(raw, min_values=self.min_values)
