"""Pydantic models for the forecasting service wire contract."""

import math
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _check_finite(values: List[float], field: str) -> List[float]:
    bad = [i for i, v in enumerate(values) if not math.isfinite(v)]
    if bad:
        raise ValueError(f"{field} contains non-finite values at positions {bad[:5]}")
    return values


class ForecastRequest(BaseModel):
    """Request body sent to the forecasting service."""

    sales_data: List[float] = Field(
        ...,
        min_length=1,
        description="Historical daily sales, oldest first"
    )
    prediction_length: int = Field(
        default=20,
        ge=1,
        le=365,
        description="Number of future days to forecast"
    )

    @field_validator("sales_data")
    @classmethod
    def validate_sales_data(cls, v):
        """Reject NaN/inf, which JSON cannot carry."""
        return _check_finite(v, "sales_data")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"sales_data": [1200.0, 1300.0, 1250.0], "prediction_length": 20}
        }
    )


class ForecastResponse(BaseModel):
    """Successful response body from the forecasting service."""

    prediction: List[float] = Field(
        ...,
        description="Predicted daily sales, one per future day"
    )

    @field_validator("prediction")
    @classmethod
    def validate_prediction(cls, v):
        return _check_finite(v, "prediction")
