"""
Data models for backup discovery and run bookkeeping.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import BackupConfig


@dataclass
class TaggedInstance:
    """An EC2 instance carrying the backup tag."""
    id: str
    name: str = ""  # Value of the Name tag, empty when the instance has none


@dataclass
class BackupImage:
    """A backup AMI discovered from existing images."""
    id: str
    name: str
    backup_date: str = ""  # Raw BackupDate tag value


class CreateStatus(Enum):
    """Result of a single image creation attempt."""
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class CreateOutcome:
    """Outcome of backing up one instance."""
    instance_id: str
    image_name: str
    status: CreateStatus
    image_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != CreateStatus.FAILED


@dataclass
class RunMetrics:
    """Counters for one run."""
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    created: int = 0
    deleted: int = 0
    snapshots_deleted: int = 0
    errors: List[str] = field(default_factory=list)

    def record_outcome(self, outcome: CreateOutcome) -> None:
        """Fold a creation outcome into the counters."""
        self.attempted += 1
        if not outcome.ok:
            self.failed += 1
            self.errors.append(f"{outcome.instance_id}: {outcome.error}")
            return

        self.succeeded += 1
        if outcome.status == CreateStatus.CREATED:
            self.created += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "created": self.created,
            "deleted": self.deleted,
            "snapshotsDeleted": self.snapshots_deleted,
            "errors": list(self.errors),
        }


@dataclass
class RunContext:
    """
    Run-scoped state threaded through the workflow phases.

    A new context is built for every invocation, so overlapping invocations
    never share instance lists, image lists or counters.
    """
    config: BackupConfig
    ec2: Any
    cloudwatch: Any
    now: datetime
    instances: List[TaggedInstance] = field(default_factory=list)
    outcomes: List[CreateOutcome] = field(default_factory=list)
    images: List[BackupImage] = field(default_factory=list)
    metrics: RunMetrics = field(default_factory=RunMetrics)
