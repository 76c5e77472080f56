# cli.py
import logging

import click

from file_manager.aws_clients import AWSClientManager
from file_manager.database.dynamodb import create_metadata_table
from file_manager.settings import get_settings


@click.group()
def cli():
    """Operate a File Management API deployment."""


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    click.echo(f"  Deployment Mode: {settings.deployment_mode}")
    click.echo(f"  AWS Region: {settings.aws_region}")
    click.echo(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    click.echo(f"  S3 Bucket: {settings.s3_bucket_name}")
    click.echo(f"  DynamoDB Table: {settings.dynamodb_table_name}")
    click.echo(f"  Presigned URL Expiry: {settings.presigned_url_expiry}s")
    click.echo(f"  Max File Size: {settings.max_file_size} bytes")
    click.echo(f"  CORS Origins: {', '.join(settings.cors_origin_list)}")
    click.echo(f"  Require Auth: {settings.require_auth}")
    click.echo(f"  Log Level: {settings.log_level}")


@cli.command()
def init_resources():
    """Create the S3 bucket and DynamoDB table if they are missing.

    Meant for local endpoints (moto server, LocalStack); production resources
    are provisioned by infrastructure tooling.
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    aws = AWSClientManager(settings)

    s3_client = aws.get_s3_client()
    existing = {bucket["Name"] for bucket in s3_client.list_buckets().get("Buckets", [])}
    if settings.s3_bucket_name in existing:
        click.echo(f"Bucket already exists: {settings.s3_bucket_name}")
    else:
        create_kwargs = {"Bucket": settings.s3_bucket_name}
        if settings.aws_region != "us-east-1":
            create_kwargs["CreateBucketConfiguration"] = {"LocationConstraint": settings.aws_region}
        s3_client.create_bucket(**create_kwargs)
        click.echo(f"Created bucket: {settings.s3_bucket_name}")

    create_metadata_table(aws.get_dynamodb_resource(), settings.dynamodb_table_name)
    click.echo(f"Table ready: {settings.dynamodb_table_name}")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Run the API with uvicorn"""
    import uvicorn

    uvicorn.run("file_manager.main:create_app", factory=True, host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
