"""Runtime settings read from the environment."""

import logging
import os
from collections.abc import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "VIRUSQUERY_"


class Settings(BaseModel):
    """Settings of the query layer.

    Each field can be set through a ``VIRUSQUERY_``-prefixed environment
    variable, e.g. ``VIRUSQUERY_MAX_CONCURRENT=4``.
    """

    default_virus: str = Field("HIV1", description="Virus used when a request names none")
    log_level: str = Field("INFO", description="Root log level of the CLI")
    max_concurrent: int = Field(8, ge=1, description="Fields resolved concurrently by the engine")
    default_subtype_count: int = Field(
        2, ge=0, description="Subtype matches returned when `first` is not given"
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return value


def load_settings(environ: Mapping[str, str] | None = None, dotenv: bool = True) -> Settings:
    """Build settings from ``environ`` (the process environment by default).

    Args:
        environ: Variables to read instead of ``os.environ``
        dotenv: Load a ``.env`` file into the process environment first

    Returns:
        Validated Settings
    """
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ
    values = {
        name: environ[f"{ENV_PREFIX}{name.upper()}"]
        for name in Settings.model_fields
        if f"{ENV_PREFIX}{name.upper()}" in environ
    }
    return Settings(**values)
