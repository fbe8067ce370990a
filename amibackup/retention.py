"""
Retention checks for backup images.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from .models import BackupImage

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


def parse_backup_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a BackupDate tag value.
    
    Args:
        value: ISO-8601 timestamp, typically with a trailing Z
        
    Returns:
        Aware UTC datetime, or None if the value is empty or malformed
    """
    if not value:
        return None

    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        # Offsets near datetime.min/max overflow when shifted to UTC
        return parsed.astimezone(timezone.utc)
    except (ValueError, TypeError, OverflowError):
        return None


def days_since(value: Optional[str], now: Optional[datetime] = None) -> Optional[int]:
    """
    Whole days elapsed since a backup date.
    
    Args:
        value: BackupDate tag value
        now: Reference time (defaults to current UTC time)
        
    Returns:
        Floor of the elapsed time in days, or None when the date is unusable
    """
    backup_date = parse_backup_date(value)
    if backup_date is None:
        return None

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return int((now - backup_date).total_seconds() // SECONDS_PER_DAY)


def is_expired(value: Optional[str], retention_days: int, now: Optional[datetime] = None) -> bool:
    """
    Check whether a backup is past retention.

    An image whose date cannot be parsed never expires.
    """
    age = days_since(value, now)
    return age is not None and age > retention_days


def plan_deletions(images: List[BackupImage], retention_days: int,
                   now: Optional[datetime] = None) -> List[Tuple[BackupImage, int]]:
    """
    Select the images whose age strictly exceeds the retention window.
    
    Args:
        images: Discovered backup images
        retention_days: Retention window in days
        now: Reference time
        
    Returns:
        List of (image, age in days) pairs, in discovery order
    """
    expired = []

    for image in images:
        age = days_since(image.backup_date, now)
        if age is None:
            logger.warning(f"Image {image.id} ({image.name}) has no usable BackupDate "
                           f"({image.backup_date!r}), keeping it")
            continue

        logger.debug(f"Image {image.id} ({image.name}) is {age} days old")
        if age > retention_days:
            expired.append((image, age))

    return expired
