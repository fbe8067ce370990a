"""
Backup image naming utilities.
"""

import re
from datetime import datetime, timezone
from typing import Optional

_NAME_RE = re.compile(r"^(?P<instance>.*)-(?P<suffix>[^-]{1,4})-(?P<stamp>\d{12})$")


def _local(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now()
    if now.tzinfo is None:
        return now
    return now.astimezone()


def name_timestamp(now: Optional[datetime] = None) -> str:
    """
    Format the minute-resolution timestamp used in image names.
    
    Args:
        now: Reference time; aware values are converted to the local clock
        
    Returns:
        str: Timestamp in format YYYYMMDDhhmm
    """
    return _local(now).strftime("%Y%m%d%H%M")


def backup_timestamp(now: Optional[datetime] = None) -> str:
    """
    Format the full backup timestamp stored in the BackupDate tag.
    
    Returns:
        str: ISO-8601 UTC timestamp with millisecond precision, e.g.
        2024-05-01T12:00:00.000Z
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    utc = now.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def image_name(instance_name: str, instance_id: str, now: Optional[datetime] = None) -> str:
    """
    Build the deterministic image name for an instance.

    Two runs within the same minute produce the same name, which is what the
    duplicate check relies on.
    
    Args:
        instance_name: Value of the instance Name tag (may be empty)
        instance_id: EC2 instance ID
        now: Reference time
        
    Returns:
        str: Image name in format <name>-<last 4 of id>-YYYYMMDDhhmm
    """
    return f"{instance_name}-{instance_id[-4:]}-{name_timestamp(now)}"


def is_valid_image_name(name: str) -> bool:
    """
    Validate backup image name format.
    
    Args:
        name: Name to validate
        
    Returns:
        bool: True if valid format
    """
    match = _NAME_RE.match(name)
    if not match:
        return False

    try:
        datetime.strptime(match.group("stamp"), "%Y%m%d%H%M")
    except ValueError:
        return False

    return True
