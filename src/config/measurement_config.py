"""
Measurement configuration.

Parameters arrive as a loosely typed mapping (YAML or programmatic). They are
validated up front with a strict Pydantic schema so that a bad option fails
the pass before any query is executed.

Example YAML Configuration:
```yaml
measurement:
  identifier: APIResponsivenessPrometheus
  params:
    useSimpleLatencyQuery: false
    allowedSlowCalls: 0
    summaryName: APIResponsivenessPrometheus
```
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, ValidationError

from src.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

MEASUREMENT_NAME = "APIResponsivenessPrometheus"


class APIResponsivenessParams(BaseModel):
    """Pydantic schema for API responsiveness measurement parameters."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    use_simple_latency_query: StrictBool = Field(
        False, alias="useSimpleLatencyQuery", description="Use per-quantile histogram queries"
    )
    allowed_slow_calls: StrictInt = Field(
        0, ge=0, alias="allowedSlowCalls", description="Tolerated slow calls per dimension"
    )
    summary_name: Optional[StrictStr] = Field(
        None, alias="summaryName", description="Name of the rendered summary"
    )


@dataclass
class MeasurementConfig:
    """
    Configuration of one measurement pass.

    Attributes:
        identifier: Prefix for diagnostic output
        params: Raw measurement parameters
    """

    identifier: str = MEASUREMENT_NAME
    params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.identifier, str) or not self.identifier:
            raise ConfigurationError(f"Invalid identifier: {self.identifier!r}")
        if not isinstance(self.params, dict):
            raise ConfigurationError(
                f"Params must be a mapping, got {type(self.params).__name__}"
            )

    def parse_params(self) -> APIResponsivenessParams:
        """
        Validate raw parameters.

        Raises:
            ConfigurationError: If any recognized option has an invalid type or value
        """
        try:
            return APIResponsivenessParams.model_validate(self.params)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigurationError(f"Invalid measurement params: {errors}") from e

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeasurementConfig":
        return cls(
            identifier=data.get("identifier", MEASUREMENT_NAME),
            params=data.get("params") or {},
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "MeasurementConfig":
        """
        Load configuration from the 'measurement' section of a YAML file.

        Raises:
            ConfigurationError: If the file is missing or cannot be parsed
        """
        yaml_file = Path(path)
        if not yaml_file.exists():
            raise ConfigurationError(f"Measurement config not found: {yaml_file}")

        try:
            with open(yaml_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML config {yaml_file}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read measurement config {yaml_file}: {e}") from e

        if not data or "measurement" not in data:
            logger.warning(f"YAML config {yaml_file} missing 'measurement' section, using defaults")
            return cls()

        section = data["measurement"]
        if not isinstance(section, dict):
            raise ConfigurationError(f"'measurement' section of {yaml_file} must be a mapping")
        return cls.from_dict(section)
