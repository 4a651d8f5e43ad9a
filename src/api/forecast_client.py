# src/api/forecast_client.py
"""
HTTP client for the external forecasting service.

Sends the historical sequence and requested horizon in a single POST and
returns the predicted sequence. Any failure is raised as ExternalServiceError;
the client never retries.
"""

import logging
from typing import Optional, Sequence, Tuple

import requests
from pydantic import ValidationError

from src.config.api_models import ForecastRequest, ForecastResponse
from src.monitoring.error_logging import ErrorComponent, ErrorLogger
from src.pipeline.errors import ConfigurationError, ExternalServiceError
from src.utils.config_loader import FORECAST_API_URL_ENV, FullConfig

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class ForecastClient:
    """
    Client for ``POST <api_url>`` with ``{"sales_data": [...], "prediction_length": n}``.

    Attributes:
        api_url (str): Forecast endpoint.
        timeout (float): Per-request timeout in seconds.
        session (requests.Session): Session used for requests.
        error_logger (ErrorLogger): Records failed requests.
    """

    def __init__(
        self,
        api_url: Optional[str],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        if not api_url or not api_url.strip():
            raise ConfigurationError(
                f"Forecast API URL is not configured; set {FORECAST_API_URL_ENV} "
                f"or forecast.api_url in the config file"
            )
        self.api_url = api_url.strip()
        self.timeout = timeout
        self.session = session or requests.Session()
        self.error_logger = ErrorLogger(ErrorComponent.FORECAST_CLIENT, base_logger=logger)

    @classmethod
    def from_config(cls, config: FullConfig) -> "ForecastClient":
        return cls(config.forecast.api_url, timeout=config.forecast.timeout_seconds)

    def predict(self, sales_data: Sequence[float], prediction_length: int = 20) -> Tuple[float, ...]:
        """
        Request a forecast for ``sales_data``.

        Args:
            sales_data (Sequence[float]): Historical values, oldest first.
            prediction_length (int): Number of future days requested.

        Returns:
            Tuple[float, ...]: Exactly ``prediction_length`` predicted values.

        Raises:
            ExternalServiceError: On transport errors, timeouts, non-2xx responses,
                undecodable or malformed bodies, or a prediction of the wrong length.
        """
        try:
            payload = ForecastRequest(
                sales_data=list(sales_data), prediction_length=prediction_length
            ).model_dump()
        except ValidationError as e:
            raise self._service_error(f"Invalid forecast request: {e}", e) from e

        logger.info(
            f"Sending POST request to forecast API: {self.api_url} "
            f"({len(payload['sales_data'])} values, horizon {prediction_length})"
        )
        try:
            response = self.session.post(self.api_url, json=payload, timeout=self.timeout)
            response.raise_for_status()  # Raises HTTPError for bad responses (4xx or 5xx)
        except requests.exceptions.HTTPError as http_err:
            status = getattr(http_err.response, "status_code", None)
            raise self._service_error(
                f"Forecast service returned an error: {http_err}", http_err, status
            ) from http_err
        except requests.exceptions.Timeout as timeout_err:
            raise self._service_error(
                f"Forecast request timed out after {self.timeout}s: {timeout_err}", timeout_err
            ) from timeout_err
        except requests.exceptions.RequestException as req_err:
            raise self._service_error(f"Forecast request failed: {req_err}", req_err) from req_err

        status = getattr(response, "status_code", None)
        try:
            body = response.json()
        except ValueError as json_err:
            raise self._service_error(
                "Forecast service returned a non-JSON body", json_err, status
            ) from json_err

        try:
            parsed = ForecastResponse.model_validate(body)
        except ValidationError as schema_err:
            raise self._service_error(
                "Forecast service returned a malformed body", schema_err, status
            ) from schema_err

        if len(parsed.prediction) != prediction_length:
            raise self._service_error(
                f"Expected {prediction_length} predicted values, got {len(parsed.prediction)}",
                status_code=status,
            )

        logger.info(f"Received {len(parsed.prediction)} predicted values")
        return tuple(parsed.prediction)

    def _service_error(
        self,
        message: str,
        cause: Optional[Exception] = None,
        status_code: Optional[int] = None,
    ) -> ExternalServiceError:
        """Build the ExternalServiceError for a failed request and log it once."""
        error = ExternalServiceError(message, status_code=status_code)
        context = {"api_url": self.api_url, "status_code": status_code}
        if cause is not None:
            context["cause"] = type(cause).__name__
        self.error_logger.log_error(message, exception=error, context=context, severity="error")
        return error
