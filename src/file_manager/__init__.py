"""File management API: projects and their files on S3, metadata in DynamoDB."""

__version__ = "1.0.0"
