"""
Tagging utilities for backup images and their snapshots.
"""

from typing import Any, Dict, List, Optional

NAME_TAG = "Name"
BACKUP_DATE_TAG = "BackupDate"
BACKUP_INSTANCE_TAG = "BackupInstanceId"
BACKUP_TAG_VALUE = "yes"


def tags_to_dict(tag_list: Optional[List[Dict[str, Any]]]) -> Dict[str, str]:
    """
    Convert an AWS tag list into a dictionary.
    
    Args:
        tag_list: Tags in ``[{"Key": ..., "Value": ...}]`` form, possibly None
        
    Returns:
        Dictionary of tag key to value
    """
    return {tag["Key"]: tag.get("Value", "") for tag in tag_list or []}


def to_tag_list(tags: Dict[str, str]) -> List[Dict[str, str]]:
    """Convert a tag dictionary into the AWS tag list form."""
    return [{"Key": key, "Value": value} for key, value in tags.items()]


def backup_tags(name: str, backup_date: str, instance_id: str) -> Dict[str, str]:
    """
    Generate the tags applied to a backup image or snapshot.
    
    Args:
        name: Value for the Name tag
        backup_date: ISO-8601 backup timestamp
        instance_id: Source instance ID
        
    Returns:
        Dictionary of tags
    """
    return {
        NAME_TAG: name,
        BACKUP_DATE_TAG: backup_date,
        BACKUP_INSTANCE_TAG: instance_id,
    }


def tag_specifications(instance_name: str, image_name: str, backup_date: str,
                       instance_id: str) -> List[Dict[str, Any]]:
    """
    Build TagSpecifications for create_image.

    The image is named after the instance while its snapshot carries the
    image name, which is what snapshot lookup matches on during deletion.
    """
    return [
        {
            "ResourceType": "image",
            "Tags": to_tag_list(backup_tags(instance_name, backup_date, instance_id)),
        },
        {
            "ResourceType": "snapshot",
            "Tags": to_tag_list(backup_tags(image_name, backup_date, instance_id)),
        },
    ]


def get_name(tags: Dict[str, str]) -> str:
    """Return the Name tag, or an empty string."""
    return tags.get(NAME_TAG, "")


def get_backup_date(tags: Dict[str, str]) -> str:
    """Return the BackupDate tag, or an empty string."""
    return tags.get(BACKUP_DATE_TAG, "")
