"""
Backup rotation workflow: create images for tagged instances, prune expired ones.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import BackupConfig
from .ec2 import (
    create_backup_image, delete_snapshot, deregister_backup_image,
    find_backup_snapshots, image_exists, list_backup_images, list_tagged_instances,
)
from .events import EventTypes, emit_event
from .metrics import publish_metrics
from .models import CreateOutcome, CreateStatus, RunContext, TaggedInstance
from .names import backup_timestamp, image_name
from .retention import plan_deletions

logger = logging.getLogger(__name__)


def run_backup_rotation(config: BackupConfig, ec2, cloudwatch,
                        now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Run one full backup rotation.
    
    Args:
        config: Run configuration
        ec2: EC2 client
        cloudwatch: CloudWatch client used for run metrics
        now: Reference time (defaults to current UTC time)
        
    Returns:
        Result dictionary with status code and metrics
        
    Raises:
        Exception: Any fatal discovery or deletion error, after metrics are published
    """
    if now is None:
        now = datetime.now(timezone.utc)

    ctx = RunContext(config=config, ec2=ec2, cloudwatch=cloudwatch, now=now)
    start_time = time.time()
    success = False

    emit_event(EventTypes.RUN_START, {
        "backup_tag": config.backup_tag,
        "backup_retention": config.backup_retention,
        "function_name": config.function_name,
    })

    try:
        discover_instances(ctx)
        if ctx.instances:
            create_images(ctx)

        discover_images(ctx)
        if ctx.images:
            prune_images(ctx)

        success = True
    except Exception as e:
        emit_event(EventTypes.RUN_FAILED, {
            "error": str(e),
            "metrics": ctx.metrics.to_dict(),
        }, level=logging.ERROR)
        raise
    finally:
        duration_ms = (time.time() - start_time) * 1000
        if publish_metrics(cloudwatch, config.metrics_namespace, ctx.metrics, duration_ms,
                           success, config.function_name):
            emit_event(EventTypes.METRICS_PUBLISHED, {"namespace": config.metrics_namespace})
        else:
            emit_event(EventTypes.METRICS_FAILED, {"namespace": config.metrics_namespace},
                       level=logging.WARNING)

    emit_event(EventTypes.RUN_DONE, ctx.metrics.to_dict())

    return {
        "statusCode": 200,
        "body": {
            "status": "success",
            "metrics": ctx.metrics.to_dict(),
        },
    }


def discover_instances(ctx: RunContext) -> None:
    """Populate the run's instance list. Errors are fatal."""
    ctx.instances = list_tagged_instances(ctx.ec2, ctx.config.backup_tag)
    emit_event(EventTypes.INSTANCES_DISCOVERED, {
        "count": len(ctx.instances),
        "instance_ids": [instance.id for instance in ctx.instances],
    })


def create_images(ctx: RunContext) -> List[CreateOutcome]:
    """
    Back up every discovered instance, one at a time.

    A failure for one instance becomes a FAILED outcome and the loop moves on.
    
    Returns:
        One outcome per instance
    """
    for instance in ctx.instances:
        outcome = backup_instance(ctx, instance)
        ctx.outcomes.append(outcome)
        ctx.metrics.record_outcome(outcome)

    return ctx.outcomes


def backup_instance(ctx: RunContext, instance: TaggedInstance) -> CreateOutcome:
    """Create an image for one instance unless a same-named image already exists."""
    name = image_name(instance.name, instance.id, ctx.now)

    try:
        if image_exists(ctx.ec2, name):
            emit_event(EventTypes.IMAGE_SKIPPED, {"instance_id": instance.id, "image_name": name})
            return CreateOutcome(instance_id=instance.id, image_name=name, status=CreateStatus.SKIPPED)

        image_id = create_backup_image(ctx.ec2, instance, name, backup_timestamp(ctx.now))
    except Exception as e:
        logger.error(f"Failed to create image for instance {instance.id}: {e}")
        emit_event(EventTypes.IMAGE_CREATE_FAILED, {
            "instance_id": instance.id,
            "image_name": name,
            "error": str(e),
        }, level=logging.ERROR)
        return CreateOutcome(instance_id=instance.id, image_name=name,
                             status=CreateStatus.FAILED, error=str(e))

    emit_event(EventTypes.IMAGE_CREATED, {
        "instance_id": instance.id,
        "image_id": image_id,
        "image_name": name,
    })
    return CreateOutcome(instance_id=instance.id, image_name=name,
                         status=CreateStatus.CREATED, image_id=image_id)


def discover_images(ctx: RunContext) -> None:
    """Populate the run's backup image list. Errors are fatal."""
    ctx.images = list_backup_images(ctx.ec2, ctx.config.backup_tag)
    emit_event(EventTypes.IMAGES_DISCOVERED, {"count": len(ctx.images)})


def prune_images(ctx: RunContext) -> None:
    """
    Remove images past retention along with their snapshots.

    The first error is recorded and re-raised, leaving the rest untouched.
    """
    for image, age in plan_deletions(ctx.images, ctx.config.backup_retention, ctx.now):
        emit_event(EventTypes.IMAGE_EXPIRED, {
            "image_id": image.id,
            "image_name": image.name,
            "age_days": age,
            "retention_days": ctx.config.backup_retention,
        })

        try:
            deregister_backup_image(ctx.ec2, image)
            ctx.metrics.deleted += 1
            emit_event(EventTypes.IMAGE_DEREGISTERED, {"image_id": image.id})

            for snapshot_id in find_backup_snapshots(ctx.ec2, image.name, image.backup_date):
                delete_snapshot(ctx.ec2, snapshot_id)
                ctx.metrics.snapshots_deleted += 1
                emit_event(EventTypes.SNAPSHOT_DELETED, {
                    "image_id": image.id,
                    "snapshot_id": snapshot_id,
                })
        except Exception as e:
            ctx.metrics.errors.append(f"{image.id}: {e}")
            emit_event(EventTypes.DELETE_FAILED, {
                "image_id": image.id,
                "error": str(e),
            }, level=logging.ERROR)
            raise
