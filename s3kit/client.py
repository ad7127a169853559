"""S3 client and bucket operations."""

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from types import TracebackType
from typing import BinaryIO, Literal, Self, overload

import httpx
from opentelemetry import trace
from pydantic import BaseModel

from s3kit.auth.credentials import Credentials, get_credentials
from s3kit.auth.metadata import InstanceMetadataClient
from s3kit.auth.signer import RequestSigner, utc_now
from s3kit.configs.s3 import S3Config
from s3kit.exceptions import S3ClientException, S3TransportClientException
from s3kit.models import S3Key, S3ListResponse
from s3kit.regions import EndpointConfig, get_region
from s3kit.request import EndpointResolver, ResolvedS3Request, S3Request
from s3kit.responses import check_response, decode_result, iter_body, read_body
from s3kit.retries.abstract import AbstractErrorRetryPredicate
from s3kit.retries.attempts import DEFAULT_ATTEMPTS, AttemptStrategy
from s3kit.retries.predicates import S3ErrorRetryPredicate
from s3kit.transport.resilient import new_http_client
from s3kit.transport.streams import encode_payload

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

ACL = Literal[
    "private",
    "public-read",
    "public-read-write",
    "authenticated-read",
    "bucket-owner-read",
    "bucket-owner-full-control",
]

CREATE_BUCKET_CONFIGURATION = """<CreateBucketConfiguration xmlns="http://s3.amazonaws.com/doc/2006-03-01/">
  <LocationConstraint>{}</LocationConstraint>
</CreateBucketConfiguration>"""

LIST_PAGE_SIZE = 1000


class S3:
    """S3 client of a region.

    Example:
        ```python
        with S3.from_config(S3Config(aws_region="eu-west-1")) as s3:
            bucket = s3.bucket("my-bucket")
            bucket.put("hello.txt", b"Hello", "text/plain", "private")
            assert bucket.get("hello.txt") == b"Hello"
        ```

    """

    def __init__(
        self,
        credentials: Credentials,
        region: EndpointConfig,
        *,
        http_client: httpx.Client | None = None,
        attempts: AttemptStrategy = DEFAULT_ATTEMPTS,
        error_predicate: AbstractErrorRetryPredicate | None = None,
        endpoint_url: str | None = None,
        clock: Callable[[], datetime] = utc_now,
        attempt_clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            credentials: Credentials used to sign the requests.
            region: Endpoint config of the region.
            http_client: HTTP client sending the requests.
                Defaults to a client built by `s3kit.transport.resilient.new_http_client`.
            attempts: Strategy used to retry idempotent operations.
            error_predicate: Decides whether a failed operation is attempted again.
                Defaults to `S3ErrorRetryPredicate`.
            endpoint_url: Service endpoint override, e.g. for S3 compatible services.
            clock: Source of the request dates.
            attempt_clock: Monotonic clock of the attempt sequences.
            sleep: Function blocking between attempts.

        """
        self._credentials = credentials
        self._resolver = EndpointResolver(region, endpoint_url)
        self._signer = RequestSigner(credentials, clock=clock)
        self._http_client = http_client or new_http_client()
        self._attempts = attempts
        self._error_predicate = error_predicate or S3ErrorRetryPredicate()
        self._attempt_clock = attempt_clock
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: S3Config | None = None, *, transport: httpx.BaseTransport | None = None) -> Self:
        """Create a client from config.

        Credentials are resolved from the config, then the environment, then the instance role.

        Args:
            config: The S3 config. If None, the config is read from the environment.
                See `s3kit.configs.s3.S3Config` for more details.
            transport: Transport doing the actual HTTP exchanges. Defaults to `httpx.HTTPTransport`.

        Raises:
            S3CredentialsNotFoundClientException: If no source provides credentials.
            S3UnknownRegionClientException: If the region is not known.

        """
        config = config or S3Config()
        region = get_region(config.aws_region)
        http_client = new_http_client(config.transport, transport=transport)

        try:
            credentials = get_credentials(
                config.aws_access_key_id,
                config.aws_secret_access_key,
                config.aws_session_token,
                metadata_client=InstanceMetadataClient(http_client) if config.use_instance_metadata else None,
            )
        except S3ClientException:
            http_client.close()
            raise

        return cls(
            credentials,
            region,
            http_client=http_client,
            attempts=config.attempts.to_strategy(),
            error_predicate=S3ErrorRetryPredicate(config.attempts.retryable_error_codes),
            endpoint_url=str(config.endpoint_url) if config.endpoint_url else None,
        )

    @property
    def region(self) -> EndpointConfig:
        """Endpoint config of the region."""
        return self._resolver.region

    @property
    def signer(self) -> RequestSigner:
        """Signer of the requests."""
        return self._signer

    @property
    def resolver(self) -> EndpointResolver:
        """Endpoint resolver of the requests."""
        return self._resolver

    def bucket(self, name: str) -> "Bucket":
        """Get a bucket by name."""
        return Bucket(self, self._resolver.normalize_bucket_name(name))

    def location_constraint(self) -> bytes:
        """Body declaring the LocationConstraint of a new bucket, if the region requires one.

        See http://docs.aws.amazon.com/AmazonS3/latest/API/RESTBucketPUT.html
        """
        if not self.region.requires_location_constraint:
            return b""
        return CREATE_BUCKET_CONFIGURATION.format(self.region.name).encode()

    def send(self, request: S3Request | ResolvedS3Request, *, stream: bool = False) -> httpx.Response:
        """Resolve, sign and send a request.

        The request is signed on every call, so sending it again never reuses a stale date.

        Args:
            request: Request to send.
            stream: Whether to leave the response body unread. The caller must close the response.

        Raises:
            S3AddressingClientException: If the request cannot be addressed.
            S3TransportClientException: If the request could not be delivered.
            S3ResponseClientException: If the status is neither 200 nor 204.

        """
        resolved = self._resolver.resolve(request)
        headers = self._signer.sign(resolved)
        content = encode_payload(resolved.payload, resolved.content_length, headers)
        http_request = self._http_client.build_request(
            resolved.method, resolved.url(), headers=headers, content=content
        )

        with tracer.start_as_current_span(
            f"S3 {resolved.method}",
            attributes={"http.method": resolved.method, "s3.bucket": resolved.bucket, "s3.path": resolved.sign_path},
        ):
            logger.debug("Running S3 request %s %s", http_request.method, http_request.url)
            try:
                response = self._http_client.send(http_request, stream=stream)
            except httpx.TransportError as error:
                raise S3TransportClientException(f"{resolved.method} {resolved.sign_path}: {error}") from error
            logger.debug("S3 response %s for %s %s", response.status_code, http_request.method, http_request.url)

        return check_response(response)

    @overload
    def query(self, request: S3Request) -> None: ...

    @overload
    def query[T_Model: BaseModel](self, request: S3Request, model: type[T_Model]) -> T_Model: ...

    def query[T_Model: BaseModel](self, request: S3Request, model: type[T_Model] | None = None) -> T_Model | None:
        """Send a request and decode its XML body into model.

        Returns:
            The decoded body, or None if no model is given.

        Raises:
            S3DecodeClientException: If the body is not a valid document of the model.

        """
        response = self.send(request)
        try:
            if model is None:
                return None
            return decode_result(response, model)
        finally:
            response.close()

    def retrying[T](self, operation: Callable[[], T]) -> T:
        """Run an idempotent operation, attempting it again on transient errors.

        Once the attempts are exhausted, the last error is raised as it is.
        """
        attempt = self._attempts.start(clock=self._attempt_clock, sleep=self._sleep)
        for number in attempt:
            try:
                return operation()
            except S3ClientException as error:
                if not (self._error_predicate.should_retry(error) and attempt.has_next()):
                    raise
                logger.info("Attempt %d failed with %r, attempting again", number, error)
                trace.get_current_span().add_event("s3kit.attempt.retry", {"attempt": number})
        raise AssertionError("an attempt sequence always allows a first attempt")

    def close(self) -> None:
        """Close the HTTP client."""
        self._http_client.close()

    def __enter__(self) -> Self:
        """Enter the context manager."""
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_value: BaseException | None, traceback: TracebackType | None
    ) -> None:
        """Exit the context manager."""
        self.close()


class Bucket:
    """Operations on an S3 bucket."""

    def __init__(self, s3: S3, name: str) -> None:
        """Initialize the bucket."""
        self.s3 = s3
        self.name = name

    def __repr__(self) -> str:
        """Return the representation of the bucket."""
        return f"Bucket({self.name!r}, region={self.s3.region.name!r})"

    def put_bucket(self, perm: ACL) -> None:
        """Create the bucket.

        See http://docs.aws.amazon.com/AmazonS3/latest/API/RESTBucketPUT.html
        """
        self.s3.query(
            S3Request(
                method="PUT",
                bucket=self.name,
                path="/",
                headers={"x-amz-acl": perm},
                payload=self.s3.location_constraint(),
            )
        )

    def del_bucket(self) -> None:
        """Remove the bucket. All objects in the bucket must be removed first.

        See http://docs.aws.amazon.com/AmazonS3/latest/API/RESTBucketDELETE.html
        """
        request = S3Request(method="DELETE", bucket=self.name, path="/")
        self.s3.retrying(lambda: self.s3.query(request))

    def get(self, path: str) -> bytes:
        """Retrieve an object.

        See http://docs.aws.amazon.com/AmazonS3/latest/API/RESTObjectGET.html
        """
        request = S3Request(bucket=self.name, path=path)

        def operation() -> bytes:
            response = self.s3.send(request, stream=True)
            try:
                return read_body(response)
            finally:
                response.close()

        return self.s3.retrying(operation)

    @contextmanager
    def get_reader(self, path: str) -> Iterator[Iterator[bytes]]:
        """Retrieve an object as a stream of chunks.

        Example:
            ```python
            with bucket.get_reader("big.bin") as chunks:
                for chunk in chunks:
                    sink.write(chunk)
            ```

        """
        response = self.get_response(path)
        try:
            yield iter_body(response)
        finally:
            response.close()

    def get_response(self, path: str) -> httpx.Response:
        """Retrieve an object, returning the streamed HTTP response.

        It is the caller's responsibility to close the response.
        """
        request = S3Request(bucket=self.name, path=path)
        return self.s3.retrying(lambda: self.s3.send(request, stream=True))

    def put(self, path: str, data: bytes, content_type: str, perm: ACL) -> None:
        """Insert an object.

        See http://docs.aws.amazon.com/AmazonS3/latest/API/RESTObjectPUT.html
        """
        self.put_reader_header(path, data, len(data), {"Content-Type": content_type}, perm)

    def put_header(self, path: str, data: bytes, custom_headers: dict[str, str], perm: ACL) -> None:
        """Insert an object, overriding the default headers with custom_headers."""
        self.put_reader_header(path, data, len(data), custom_headers, perm)

    def put_reader(self, path: str, reader: BinaryIO, length: int, content_type: str, perm: ACL) -> None:
        """Insert an object by consuming length bytes from reader."""
        self.put_reader_header(path, reader, length, {"Content-Type": content_type}, perm)

    def put_reader_header(
        self,
        path: str,
        reader: BinaryIO | bytes,
        length: int,
        custom_headers: dict[str, str],
        perm: ACL,
    ) -> None:
        """Insert an object from reader, overriding the default headers with custom_headers."""
        headers = {
            "Content-Length": str(length),
            "Content-Type": "application/text",
            "x-amz-acl": perm,
        }
        headers.update(custom_headers)
        self.s3.query(S3Request(method="PUT", bucket=self.name, path=path, headers=headers, payload=reader))

    def delete(self, path: str) -> None:
        """Remove an object.

        See http://docs.aws.amazon.com/AmazonS3/latest/API/RESTObjectDELETE.html
        """
        self.s3.query(S3Request(method="DELETE", bucket=self.name, path=path))

    def list(self, prefix: str = "", delim: str = "", marker: str = "", max_keys: int = 0) -> S3ListResponse:
        """List objects in the bucket.

        For example, given these keys in a bucket::

            index.html
            index2.html
            photos/2006/January/sample.jpg
            photos/2006/February/sample2.jpg

        listing with ``delim="/"`` returns ``index.html`` and ``index2.html`` as
        contents and ``photos/`` as common prefix. Listing with ``delim="/"`` and
        ``prefix="photos/2006/"`` returns no contents and the common prefixes
        ``photos/2006/February/`` and ``photos/2006/January/``.

        Args:
            prefix: Only keys starting with prefix are listed.
            delim: Groups keys sharing a prefix up to the next delimiter into one common prefix.
            marker: Only keys alphabetically after marker are listed.
            max_keys: Maximum number of keys and common prefixes. 0 lets the server decide (1000).

        See http://docs.aws.amazon.com/AmazonS3/latest/API/RESTBucketGET.html

        """
        params = {"prefix": prefix, "delimiter": delim, "marker": marker}
        if max_keys:
            params["max-keys"] = str(max_keys)
        request = S3Request(bucket=self.name, params=params)
        return self.s3.retrying(lambda: self.s3.query(request, S3ListResponse))

    def get_bucket_contents(self) -> dict[str, S3Key]:
        """Map all key names in the bucket to their keys, following truncated listings."""
        contents: dict[str, S3Key] = {}
        marker = ""
        while True:
            page = self.list(marker=marker, max_keys=LIST_PAGE_SIZE)
            for key in page.contents:
                contents[key.key] = key
            if not page.is_truncated or not page.contents:
                return contents
            # NextMarker is only sent for delimited listings.
            marker = page.next_marker or page.contents[-1].key

    def url(self, path: str) -> str:
        """Non-signed URL of the object. Only works for publicly readable objects (see `signed_url`)."""
        resolved = self.s3.resolver.resolve(S3Request(bucket=self.name, path=path))
        return str(resolved.url({}))

    def signed_url(self, path: str, expires: datetime) -> str:
        """URL granting anyone holding it access to the object until expires."""
        resolved = self.s3.resolver.resolve(S3Request(bucket=self.name, path=path))
        return str(self.s3.signer.presign(resolved, expires))
