"""Main CLI entrypoint for AMI backups."""

import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import click

from ..config import configure_logging, load_config
from ..ec2 import ec2_client, list_backup_images
from ..metrics import cloudwatch_client
from ..names import image_name, is_valid_image_name
from ..retention import days_since, is_expired
from ..workflow import run_backup_rotation


@click.group()
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
@click.option('--log-level', default=None, help='Log level (defaults to LOG_LEVEL or INFO)')
@click.pass_context
def main(ctx, output_json, log_level):
    """AMI Backup - create and rotate EC2 image backups."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = output_json
    configure_logging(log_level)


def _json_output(data: Dict[str, Any]) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=None, default=str))


def _human_output(message: str) -> None:
    """Output human-readable message."""
    if not click.get_current_context().obj.get('json', False):
        click.echo(message)


def _load(backup_tag: Optional[str], retention_days: Optional[int], region: Optional[str]):
    try:
        return load_config(
            backup_tag=backup_tag,
            backup_retention=retention_days,
            region=region,
        )
    except ValueError as e:
        raise click.UsageError(str(e))


@main.command()
@click.option('--backup-tag', help='Tag key marking instances for backup (env: backup_tag)')
@click.option('--retention-days', type=int, help='Retention window in days (env: backup_retention)')
@click.option('--region', help='AWS region')
@click.pass_context
def run(ctx, backup_tag, retention_days, region):
    """Create backups and remove expired ones."""
    config = _load(backup_tag, retention_days, region)
    output_json = ctx.obj['json']

    try:
        result = run_backup_rotation(
            config,
            ec2=ec2_client(config.region),
            cloudwatch=cloudwatch_client(config.region),
        )
    except Exception as e:
        error_msg = f"Backup rotation failed: {str(e)}"
        if output_json:
            _json_output({'status': 'failed', 'error': error_msg})
        else:
            _human_output(f"❌ {error_msg}")
        sys.exit(1)

    metrics = result['body']['metrics']
    if output_json:
        _json_output(result['body'])
    else:
        _human_output("✅ Backup rotation complete")
        _human_output(f"Instances: {metrics['attempted']} attempted, "
                      f"{metrics['succeeded']} succeeded, {metrics['failed']} failed")
        _human_output(f"Images: {metrics['created']} created, {metrics['deleted']} deleted")
        _human_output(f"Snapshots deleted: {metrics['snapshotsDeleted']}")
        for error in metrics['errors']:
            _human_output(f"  ⚠️  {error}")


@main.command()
@click.option('--backup-tag', help='Tag key marking instances for backup (env: backup_tag)')
@click.option('--retention-days', type=int, help='Retention window in days (env: backup_retention)')
@click.option('--region', help='AWS region')
@click.pass_context
def images(ctx, backup_tag, retention_days, region):
    """List backup images with their age."""
    config = _load(backup_tag, retention_days, region)
    now = datetime.now(timezone.utc)

    try:
        found = list_backup_images(ec2_client(config.region), config.backup_tag)
    except Exception as e:
        error_msg = f"Listing backup images failed: {str(e)}"
        if ctx.obj['json']:
            _json_output({'status': 'failed', 'error': error_msg})
        else:
            _human_output(f"❌ {error_msg}")
        sys.exit(1)

    rows = []
    for image in found:
        age = days_since(image.backup_date, now)
        rows.append({
            'image_id': image.id,
            'name': image.name,
            'backup_date': image.backup_date,
            'age_days': age,
            'expired': is_expired(image.backup_date, config.backup_retention, now),
        })

    if ctx.obj['json']:
        _json_output({'retention_days': config.backup_retention, 'images': rows})
        return

    if not rows:
        _human_output("No backup images found")
        return

    for row in rows:
        age = "unknown" if row['age_days'] is None else f"{row['age_days']}d"
        marker = "🗑️ " if row['expired'] else "  "
        _human_output(f"{marker}{row['image_id']}  {row['name']}  {age}")


@main.command()
@click.argument('instance_id')
@click.argument('instance_name', default='')
@click.pass_context
def name(ctx, instance_id, instance_name):
    """Print the image name a backup taken now would get."""
    result = image_name(instance_name, instance_id)

    if ctx.obj['json']:
        _json_output({'image_name': result, 'valid': is_valid_image_name(result)})
    else:
        click.echo(result)


if __name__ == '__main__':
    main()
