"""
Tests for backup age and retention decisions.
"""

from datetime import timedelta

import pytest

from amibackup.models import BackupImage
from amibackup.names import backup_timestamp
from amibackup.retention import days_since, is_expired, parse_backup_date, plan_deletions

from conftest import NOW


def ago(**kwargs) -> str:
    return backup_timestamp(NOW - timedelta(**kwargs))


class TestDaysSince:
    """Test day difference computation."""

    def test_whole_days(self):
        assert days_since(ago(days=40), NOW) == 40

    def test_partial_day_floors(self):
        assert days_since(ago(days=10, hours=23), NOW) == 10

    def test_less_than_a_day(self):
        assert days_since(ago(hours=5), NOW) == 0

    def test_future_date_is_negative(self):
        assert days_since(backup_timestamp(NOW + timedelta(hours=1)), NOW) == -1

    def test_offset_timestamp(self):
        assert days_since("2024-04-01T14:00:00+02:00", NOW) == 30

    def test_naive_timestamp_is_utc(self):
        assert days_since("2024-04-21T12:00:00", NOW) == 10

    @pytest.mark.parametrize("value", ["", None, "not-a-date", "2024-13-45T00:00:00Z",
                                       "0001-01-01T00:00:00+05:00", "9999-12-31T23:00:00-05:00"])
    def test_unusable_dates(self, value):
        """Empty or malformed dates have no age."""
        assert parse_backup_date(value) is None
        assert days_since(value, NOW) is None


class TestIsExpired:
    """Test the retention boundary."""

    def test_older_than_retention(self):
        assert is_expired(ago(days=31), 30, NOW)

    def test_equal_to_retention_is_kept(self):
        """Age equal to retention is not expired."""
        assert not is_expired(ago(days=30), 30, NOW)
        assert not is_expired(ago(days=30, hours=23), 30, NOW)

    def test_younger_than_retention(self):
        assert not is_expired(ago(days=10), 30, NOW)

    def test_malformed_date_never_expires(self):
        assert not is_expired("", 0, NOW)
        assert not is_expired("garbage", 0, NOW)


def test_plan_deletions_selects_expired_images():
    images = [
        BackupImage(id="ami-old", name="web-aaaa-1", backup_date=ago(days=40)),
        BackupImage(id="ami-new", name="web-aaaa-2", backup_date=ago(days=10)),
        BackupImage(id="ami-edge", name="web-aaaa-3", backup_date=ago(days=30)),
        BackupImage(id="ami-bad", name="web-aaaa-4", backup_date=""),
    ]

    planned = plan_deletions(images, 30, NOW)

    assert [(img.id, age) for img, age in planned] == [("ami-old", 40)]
