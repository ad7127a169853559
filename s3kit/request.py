"""Outbound S3 request descriptors and endpoint resolution.

A request is built as an unresolved `S3Request` and turned into a
`ResolvedS3Request` exactly once by `EndpointResolver.resolve`. The resolved
value carries the final addressing (base URL and path) and the path used in
the signature base string. Signing does not touch it, so the same resolved
request can be signed again on every attempt.
"""

import logging
from dataclasses import dataclass, field
from typing import BinaryIO

import httpx

from s3kit.exceptions import S3AddressingClientException
from s3kit.regions import BUCKET_PLACEHOLDER, EndpointConfig

logger = logging.getLogger(__name__)

CONTENT_LENGTH_HEADER = "Content-Length"
FORBIDDEN_BUCKET_CHARACTERS = frozenset("/:@")

Payload = bytes | BinaryIO


@dataclass(frozen=True)
class S3Request:
    """Unresolved S3 request.

    Attributes:
        method: HTTP method. Empty means GET.
        bucket: Bucket name. Empty for account level requests.
        path: Object path inside the bucket.
        params: Query parameters.
        headers: Request headers. ``Content-Length`` is moved out during resolution.
        payload: Request body.

    """

    method: str = "GET"
    bucket: str = ""
    path: str = "/"
    params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    payload: Payload | None = None

    @property
    def resolved(self) -> bool:
        """Whether the request went through endpoint resolution."""
        return False


@dataclass(frozen=True)
class ResolvedS3Request:
    """S3 request with fixed addressing.

    Attributes:
        method: HTTP method.
        bucket: Bucket name after region normalization.
        path: Path of the resolved URL.
        sign_path: Bucket qualified path used in the signature, regardless of addressing mode.
        params: Query parameters.
        headers: Request headers without ``Content-Length``.
        base_url: Endpoint the request is sent to.
        payload: Request body.
        content_length: Body length taken out of the headers, if any.

    """

    method: str
    bucket: str
    path: str
    sign_path: str
    params: dict[str, str]
    headers: httpx.Headers
    base_url: str
    payload: Payload | None = None
    content_length: int | None = None

    @property
    def resolved(self) -> bool:
        """Whether the request went through endpoint resolution."""
        return True

    @property
    def host(self) -> str:
        """Host (with port, if any) of the base URL."""
        return httpx.URL(self.base_url).netloc.decode("ascii")

    def url(self, params: dict[str, str] | None = None) -> httpx.URL:
        """Build the URL of the request.

        Args:
            params: Query parameters to use instead of the request ones.

        """
        query = self.params if params is None else params
        return httpx.URL(self.base_url).copy_with(path=self.path, params=sorted(query.items()))


class EndpointResolver:
    """Decides between path-style and virtual-hosted-style addressing for a region."""

    def __init__(self, region: EndpointConfig, endpoint_url: str | None = None) -> None:
        """Initialize the resolver.

        Args:
            region: Endpoint config of the region.
            endpoint_url: Service endpoint override, e.g. for S3 compatible services.
                Takes precedence over the region service endpoint. Buckets are then
                addressed path-style.

        """
        self._region = region
        self._service_endpoint = endpoint_url or region.service_endpoint
        self._template = "" if endpoint_url else region.virtual_hosted_endpoint_template

    @property
    def region(self) -> EndpointConfig:
        """Endpoint config of the region."""
        return self._region

    def normalize_bucket_name(self, bucket: str) -> str:
        """Lowercase the bucket name if the region requires it."""
        if self._template or self._region.force_lowercase_bucket_names:
            return bucket.lower()
        return bucket

    def resolve(self, request: S3Request | ResolvedS3Request) -> ResolvedS3Request:
        """Resolve the addressing of a request.

        Resolved requests are returned as they are, so a path is never rewritten twice.

        Raises:
            S3AddressingClientException: If the bucket name, the path or the endpoint cannot be used.

        """
        if isinstance(request, ResolvedS3Request):
            return request

        method = request.method or "GET"
        path = request.path if request.path.startswith("/") else "/" + request.path
        sign_path = path
        base_url = self._service_endpoint
        bucket = request.bucket

        if bucket:
            bucket = self.normalize_bucket_name(bucket)
            if not self._template:
                path = "/" + bucket + path
            else:
                if FORBIDDEN_BUCKET_CHARACTERS.intersection(bucket):
                    raise S3AddressingClientException(f"bad S3 bucket: {bucket!r}")
                base_url = self._template.replace(BUCKET_PLACEHOLDER, bucket)
            sign_path = "/" + bucket + sign_path

        self._validate_base_url(base_url)
        try:
            httpx.URL(base_url).copy_with(path=path)
        except httpx.InvalidURL as error:
            raise S3AddressingClientException(f"bad S3 path {path!r}: {error}") from error

        headers = httpx.Headers(request.headers)
        content_length: int | None = None
        if CONTENT_LENGTH_HEADER in headers:
            raw_length = headers.pop(CONTENT_LENGTH_HEADER)
            try:
                content_length = int(raw_length)
            except ValueError:
                raise S3AddressingClientException(f"bad Content-Length header: {raw_length!r}") from None

        logger.debug("Resolved %s %s to %s%s (sign path %s)", method, request.path, base_url, path, sign_path)

        return ResolvedS3Request(
            method=method,
            bucket=bucket,
            path=path,
            sign_path=sign_path,
            params=dict(request.params),
            headers=headers,
            base_url=base_url,
            payload=request.payload,
            content_length=content_length,
        )

    @staticmethod
    def _validate_base_url(base_url: str) -> None:
        try:
            url = httpx.URL(base_url)
        except httpx.InvalidURL as error:
            raise S3AddressingClientException(f"bad S3 endpoint URL {base_url!r}: {error}") from error
        if not url.host:
            raise S3AddressingClientException(f"bad S3 endpoint URL {base_url!r}: missing host")
