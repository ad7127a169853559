"""S3 client exceptions."""

from typing import Any


class S3ClientException(Exception):
    """Base exception for S3 client errors."""


class S3AddressingClientException(S3ClientException):
    """Raised when a bucket name or endpoint cannot be used to build a request URL."""


class S3UnknownRegionClientException(S3ClientException):
    """Raised when a region name is not present in the region table."""


class S3CredentialsNotFoundClientException(S3ClientException):
    """Raised when no credentials could be found in any source."""


class S3MetadataClientException(S3ClientException):
    """Raised when the instance metadata service returns an unusable answer."""


class S3TransportClientException(S3ClientException):
    """Raised when the request could not be delivered because of a network failure.

    The original httpx error is available as ``__cause__``.
    """


class S3DecodeClientException(S3ClientException):
    """Raised when a successful response body cannot be decoded into the expected shape."""


class S3ResponseClientException(S3ClientException):
    """Structured error returned by the server for a non-success status.

    Attributes:
        status_code: HTTP status code of the response.
        code: Error code token from the error document, e.g. ``NoSuchBucket``.
        message: Human readable message. Falls back to the HTTP status line.
        request_id: Request id assigned by the server, if any.
        bucket_name: Bucket the error refers to, if any.
        host_id: Host id assigned by the server, if any.

    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        code: str = "",
        request_id: str = "",
        bucket_name: str = "",
        host_id: str = "",
    ) -> None:
        """Initialize the exception."""
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.request_id = request_id
        self.bucket_name = bucket_name
        self.host_id = host_id

    def __repr__(self) -> str:
        """Return the representation of the exception."""
        return f"<{self.__class__.__name__} (status: {self.status_code}, code: {self.code})> {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Return the structured error as a plain dictionary."""
        return {
            "status_code": self.status_code,
            "code": self.code,
            "message": self.message,
            "request_id": self.request_id,
            "bucket_name": self.bucket_name,
            "host_id": self.host_id,
        }


class S3BucketAlreadyExistsClientException(S3ResponseClientException):
    """Raised when attempting to create a bucket that already exists."""


class S3BucketAlreadyOwnedByYouClientException(S3ResponseClientException):
    """Raised when attempting to create a bucket that you already own."""


class S3NoSuchBucketClientException(S3ResponseClientException):
    """Raised when the specified bucket does not exist."""


class S3NoSuchKeyClientException(S3ResponseClientException):
    """Raised when the specified object key does not exist."""


class S3NoSuchUploadClientException(S3ResponseClientException):
    """Raised when the specified upload does not exist."""


class S3AccessDeniedClientException(S3ResponseClientException):
    """Raised when access is denied to the specified resource."""


class S3BucketNotEmptyClientException(S3ResponseClientException):
    """Raised when attempting to delete a bucket that is not empty."""


class S3InvalidBucketNameClientException(S3ResponseClientException):
    """Raised when the bucket name is invalid."""


class S3SignatureDoesNotMatchClientException(S3ResponseClientException):
    """Raised when the server computed a different signature."""


class S3RequestTimeTooSkewedClientException(S3ResponseClientException):
    """Raised when the request date differs too much from the server time."""


class S3InternalErrorClientException(S3ResponseClientException):
    """Raised when the server reports an internal error."""


RESPONSE_EXCEPTIONS: dict[str, type[S3ResponseClientException]] = {
    "BucketAlreadyExists": S3BucketAlreadyExistsClientException,
    "BucketAlreadyOwnedByYou": S3BucketAlreadyOwnedByYouClientException,
    "NoSuchBucket": S3NoSuchBucketClientException,
    "NoSuchKey": S3NoSuchKeyClientException,
    "NoSuchUpload": S3NoSuchUploadClientException,
    "AccessDenied": S3AccessDeniedClientException,
    "BucketNotEmpty": S3BucketNotEmptyClientException,
    "InvalidBucketName": S3InvalidBucketNameClientException,
    "SignatureDoesNotMatch": S3SignatureDoesNotMatchClientException,
    "RequestTimeTooSkewed": S3RequestTimeTooSkewedClientException,
    "InternalError": S3InternalErrorClientException,
}
