"""
Shared fixtures: mocked EC2 and CloudWatch clients.
"""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from amibackup.config import BackupConfig


NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def client_error(operation: str, code: str = "UnauthorizedOperation", message: str = "boom") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def instance(instance_id, name=None):
    data = {"InstanceId": instance_id, "Tags": [{"Key": "Backup", "Value": "yes"}]}
    if name is not None:
        data["Tags"].append({"Key": "Name", "Value": name})
    return data


def image(image_id, name, backup_date=None):
    tags = [{"Key": "Name", "Value": "web"}]
    if backup_date is not None:
        tags.append({"Key": "BackupDate", "Value": backup_date})
    return {"ImageId": image_id, "Name": name, "Tags": tags}


class FakeEC2:
    """Builds a Mock EC2 client with paginators backed by plain lists."""

    def __init__(self, instances=None, images=None, snapshots=None, existing_names=()):
        self.client = Mock()
        self.snapshots = snapshots or {}
        self.existing_names = set(existing_names)
        self.paginators = {
            "describe_instances": Mock(),
            "describe_images": Mock(),
            "describe_snapshots": Mock(),
        }
        self.paginators["describe_instances"].paginate.return_value = [
            {"Reservations": [{"Instances": instances or []}]}
        ]
        self.paginators["describe_images"].paginate.return_value = [
            {"Images": images or []}
        ]
        self.paginators["describe_snapshots"].paginate.side_effect = self._snapshot_pages

        self.client.get_paginator.side_effect = lambda name: self.paginators[name]
        self.client.describe_images.side_effect = self._describe_images
        self.client.create_image.side_effect = lambda **kw: {"ImageId": f"ami-{kw['InstanceId'][-4:]}"}

    def _describe_images(self, **kwargs):
        name = kwargs["Filters"][0]["Values"][0]
        if name in self.existing_names:
            return {"Images": [{"ImageId": "ami-existing", "Name": name}]}
        return {"Images": []}

    def _snapshot_pages(self, **kwargs):
        filters = {f["Name"]: f["Values"][0] for f in kwargs["Filters"]}
        key = (filters["tag:Name"], filters["tag:BackupDate"])
        return [{"Snapshots": [{"SnapshotId": sid} for sid in self.snapshots.get(key, [])]}]


@pytest.fixture
def config():
    return BackupConfig(backup_tag="Backup", backup_retention=30, function_name="test-fn")


@pytest.fixture
def cloudwatch():
    return Mock()
