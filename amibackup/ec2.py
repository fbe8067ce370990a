"""
EC2 calls for discovering, creating and removing backup images.
"""

import logging
from typing import List, Optional

import boto3

from .models import BackupImage, TaggedInstance
from .tags import (
    BACKUP_DATE_TAG, BACKUP_TAG_VALUE, NAME_TAG,
    get_backup_date, get_name, tag_specifications, tags_to_dict,
)

logger = logging.getLogger(__name__)


def ec2_client(region: Optional[str] = None):
    """Create an EC2 client, optionally pinned to a region."""
    if region:
        return boto3.client("ec2", region_name=region)
    return boto3.client("ec2")


def list_tagged_instances(ec2, backup_tag: str) -> List[TaggedInstance]:
    """
    List instances whose backup tag is set to "yes".
    
    Args:
        ec2: EC2 client
        backup_tag: Tag key marking instances for backup
        
    Returns:
        List of tagged instances
    """
    found = []

    paginator = ec2.get_paginator("describe_instances")
    for page in paginator.paginate(
        Filters=[{"Name": f"tag:{backup_tag}", "Values": [BACKUP_TAG_VALUE]}]
    ):
        for reservation in page.get("Reservations", []):
            for instance in reservation.get("Instances", []):
                tags = tags_to_dict(instance.get("Tags"))
                found.append(TaggedInstance(id=instance["InstanceId"], name=get_name(tags)))

    return found


def image_exists(ec2, image_name: str) -> bool:
    """Check whether an image with this exact name already exists."""
    response = ec2.describe_images(
        Owners=["self"],
        Filters=[{"Name": "name", "Values": [image_name]}],
    )
    return len(response.get("Images", [])) > 0


def create_backup_image(ec2, instance: TaggedInstance, image_name: str, backup_date: str) -> str:
    """
    Request a no-reboot image of an instance.
    
    Args:
        ec2: EC2 client
        instance: Instance to back up
        image_name: Name for the new image
        backup_date: ISO-8601 timestamp for the BackupDate tag
        
    Returns:
        ID of the new image
    """
    response = ec2.create_image(
        InstanceId=instance.id,
        Name=image_name,
        Description=f"AMI Backup of {instance.id}",
        NoReboot=True,
        TagSpecifications=tag_specifications(instance.name, image_name, backup_date, instance.id),
    )
    image_id = response.get("ImageId", "")
    logger.info(f"Requested image {image_id} ({image_name}) for instance {instance.id}")
    return image_id


def list_backup_images(ec2, backup_tag: str) -> List[BackupImage]:
    """
    List images carrying the backup tag key or the BackupDate tag key.

    EC2 ORs the values of a single tag-key filter, so images without a
    BackupDate tag can be returned; they come back with an empty date.
    
    Args:
        ec2: EC2 client
        backup_tag: Tag key marking instances for backup
        
    Returns:
        List of backup images
    """
    found = []

    paginator = ec2.get_paginator("describe_images")
    for page in paginator.paginate(
        Owners=["self"],
        Filters=[{"Name": "tag-key", "Values": [backup_tag, BACKUP_DATE_TAG]}],
    ):
        for image in page.get("Images", []):
            tags = tags_to_dict(image.get("Tags"))
            found.append(BackupImage(
                id=image["ImageId"],
                name=image.get("Name", ""),
                backup_date=get_backup_date(tags),
            ))

    return found


def find_backup_snapshots(ec2, image_name: str, backup_date: str) -> List[str]:
    """
    Find snapshots created alongside a backup image.
    
    Args:
        ec2: EC2 client
        image_name: Image name, stored as the snapshot Name tag
        backup_date: BackupDate tag value shared by image and snapshots
        
    Returns:
        List of snapshot IDs
    """
    snapshot_ids = []

    paginator = ec2.get_paginator("describe_snapshots")
    for page in paginator.paginate(
        OwnerIds=["self"],
        Filters=[
            {"Name": f"tag:{NAME_TAG}", "Values": [image_name]},
            {"Name": f"tag:{BACKUP_DATE_TAG}", "Values": [backup_date]},
        ],
    ):
        for snapshot in page.get("Snapshots", []):
            snapshot_ids.append(snapshot["SnapshotId"])

    return snapshot_ids


def deregister_backup_image(ec2, image: BackupImage) -> None:
    """Deregister a backup image. Its snapshots are left in place."""
    ec2.deregister_image(ImageId=image.id)
    logger.info(f"Deregistered image {image.id} ({image.name})")


def delete_snapshot(ec2, snapshot_id: str) -> None:
    """Delete a single snapshot."""
    ec2.delete_snapshot(SnapshotId=snapshot_id)
    logger.info(f"Deleted snapshot {snapshot_id}")
