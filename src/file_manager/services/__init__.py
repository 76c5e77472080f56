from .file_transfer import DownloadUrl, FileTransferService, UploadUrl, derive_storage_key

__all__ = ['FileTransferService', 'UploadUrl', 'DownloadUrl', 'derive_storage_key']
