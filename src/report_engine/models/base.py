"""Base model configuration for all Pydantic models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ReportBaseModel(BaseModel):
    """Base model with common configuration.

    Conventions:
    - All timestamps are timezone-aware datetimes (UTC preferred)
    - Field names are lowercase snake_case
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


class MetricRecord(ReportBaseModel):
    """Base for records returned by an analytics data source.

    Accepts both snake_case and camelCase keys so raw API payloads
    validate without a translation step. NaN and infinity are rejected.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
        alias_generator=to_camel,
        allow_inf_nan=False,
    )

    @property
    def has_data(self) -> bool:
        """Whether the record carries anything worth rendering."""
        return True
