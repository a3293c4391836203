"""Configuration module for the API responsiveness measurement."""

from src.config.measurement_config import (
    MEASUREMENT_NAME,
    APIResponsivenessParams,
    MeasurementConfig,
)

__all__ = [
    "MEASUREMENT_NAME",
    "APIResponsivenessParams",
    "MeasurementConfig",
]
