"""
Configuration loading for backup runs.
"""

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator

DEFAULT_FUNCTION_NAME = "ami-backup-rotation"
DEFAULT_NAMESPACE = "AMIBackupRotation"


class BackupConfig(BaseModel):
    """Settings for a backup rotation run."""
    backup_tag: str
    backup_retention: int
    function_name: str = DEFAULT_FUNCTION_NAME
    region: Optional[str] = None
    metrics_namespace: str = DEFAULT_NAMESPACE

    @field_validator("backup_tag")
    @classmethod
    def _tag_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("backup_retention")
    @classmethod
    def _retention_not_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value


def _lookup(environ: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = environ.get(name)
        if value not in (None, ""):
            return value
    return None


def load_config(environ: Optional[Mapping[str, str]] = None, **overrides) -> BackupConfig:
    """
    Load configuration from the environment.
    
    Args:
        environ: Environment mapping (defaults to os.environ)
        **overrides: Explicit values that take precedence, None values are ignored
        
    Returns:
        Validated configuration
        
    Raises:
        ValueError: If a required value is missing or invalid
    """
    if environ is None:
        environ = os.environ

    values = {
        "backup_tag": _lookup(environ, "backup_tag", "BACKUP_TAG"),
        "backup_retention": _lookup(environ, "backup_retention", "BACKUP_RETENTION"),
        "function_name": _lookup(environ, "AWS_LAMBDA_FUNCTION_NAME") or DEFAULT_FUNCTION_NAME,
        "region": _lookup(environ, "AWS_REGION", "AWS_DEFAULT_REGION"),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    for required in ("backup_tag", "backup_retention"):
        if values.get(required) is None:
            raise ValueError(f"Missing required configuration value: {required}")

    try:
        return BackupConfig(**values)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        raise ValueError(f"Invalid configuration value for {fields}: {e}") from e


def configure_logging(level: Optional[str] = None) -> None:
    """Set the root log level from LOG_LEVEL (default INFO)."""
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    root.setLevel(getattr(logging, level_name, logging.INFO))
