"""
Metadata Database Layer

Services for project and file rows stored in the single DynamoDB metadata table.
"""

from .project_service import ProjectService
from .file_service import FileMetadataService

__all__ = ['ProjectService', 'FileMetadataService']
