"""
AMI Backup - Scheduled EC2 image backups with retention-based pruning.

This package provides a Lambda handler and a CLI that create AMIs of tagged
instances and remove backup images (and their snapshots) past retention.
"""

__version__ = "0.1.0"
