"""
AWS Lambda entry point.
"""

import logging
from typing import Any, Dict

from .config import configure_logging, load_config
from .ec2 import ec2_client
from .metrics import cloudwatch_client
from .workflow import run_backup_rotation

logger = logging.getLogger(__name__)


def handler(event, context) -> Dict[str, Any]:
    """
    Run a backup rotation for a scheduled trigger.

    The event and context are not used. Configuration comes from the
    environment on every invocation.
    """
    configure_logging()
    config = load_config()

    logger.info(f"Starting backup rotation for tag {config.backup_tag} "
                f"with {config.backup_retention} day retention")

    return run_backup_rotation(
        config,
        ec2=ec2_client(config.region),
        cloudwatch=cloudwatch_client(config.region),
    )
