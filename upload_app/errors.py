"""Exceptions raised while unlocking the credential and pushing an upload."""


class UploadError(Exception):
    """Base exception for the upload widget."""


class RepositoryNotInitialized(UploadError):
    def __init__(self, message="Repository is not initialized"):
        super().__init__(message)


class BranchNotSet(UploadError):
    def __init__(self, message="Branch is not set"):
        super().__init__(message)


class DecryptionError(UploadError):
    """Raised when the passphrase does not unlock the stored token."""


class InvalidDescriptor(DecryptionError):
    """Raised when the encrypted token descriptor is malformed or unsupported."""


class EmptyUpload(UploadError):
    pass


class FileTooLarge(UploadError):
    def __init__(self, size, limit):
        self.size = size
        self.limit = limit
        super().__init__(f"File is {size} bytes, the limit is {limit} bytes")


class GitHubApiError(UploadError):
    """A GitHub REST call failed (network, auth or validation)."""

    def __init__(self, message, status_code=None, url=None):
        self.status_code = status_code
        self.url = url
        super().__init__(message)
