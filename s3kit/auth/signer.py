"""S3 request signing (signature version 2).

The string to sign is::

    METHOD\\n
    Content-MD5\\n
    Content-Type\\n
    Date\\n
    x-amz-header:value\\n  (one line per x-amz-* header, sorted)
    /bucket/path?sub-resources

See http://docs.aws.amazon.com/AmazonS3/latest/dev/RESTAuthentication.html
"""

import base64
import hashlib
import hmac
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from email.utils import format_datetime

import httpx

from s3kit.auth.credentials import Credentials
from s3kit.request import ResolvedS3Request

logger = logging.getLogger(__name__)

SECURITY_TOKEN_HEADER = "x-amz-security-token"
AMZ_HEADER_PREFIX = "x-amz-"
AMZ_DATE_HEADER = "x-amz-date"
EXPIRES_PARAM = "Expires"

# Query parameters that select a sub-resource and therefore take part in the signature.
SUB_RESOURCES = frozenset(
    {
        "acl",
        "delete",
        "location",
        "logging",
        "notification",
        "partNumber",
        "policy",
        "requestPayment",
        "response-cache-control",
        "response-content-disposition",
        "response-content-encoding",
        "response-content-language",
        "response-content-type",
        "response-expires",
        "torrent",
        "uploadId",
        "uploads",
        "versionId",
        "versioning",
        "versions",
        "website",
    }
)


def utc_now() -> datetime:
    """Get the current time in UTC."""
    return datetime.now(UTC)


def canonical_string(
    method: str,
    sign_path: str,
    params: Mapping[str, str],
    headers: httpx.Headers | Mapping[str, str],
) -> str:
    """Build the string to sign of a request.

    Args:
        method: HTTP method.
        sign_path: Bucket qualified path of the resource.
        params: Query parameters. Only sub-resources are signed. When ``Expires``
            is present it replaces the date, as for pre-signed URLs.
        headers: Request headers.

    """
    headers = httpx.Headers(headers)

    content_md5 = headers.get("content-md5", "")
    content_type = headers.get("content-type", "")
    date = "" if AMZ_DATE_HEADER in headers else headers.get("date", "")

    amz_headers: dict[str, list[str]] = {}
    for name, value in headers.multi_items():
        name = name.lower()
        if name.startswith(AMZ_HEADER_PREFIX):
            amz_headers.setdefault(name, []).append(value)
    amz_lines = "".join(line + "\n" for line in sorted(f"{k}:{','.join(v)}" for k, v in amz_headers.items()))

    if EXPIRES_PARAM in params:
        date = params[EXPIRES_PARAM]

    sub_resources = sorted(
        key if value == "" else f"{key}={value}" for key, value in params.items() if key in SUB_RESOURCES
    )
    resource = sign_path + ("?" + "&".join(sub_resources) if sub_resources else "")

    return f"{method}\n{content_md5}\n{content_type}\n{date}\n{amz_lines}{resource}"


def compute_signature(secret_key: str, string_to_sign: str) -> str:
    """Compute the base64 encoded HMAC-SHA1 of the string to sign."""
    digest = hmac.new(secret_key.encode(), string_to_sign.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


class RequestSigner:
    """Signs resolved requests with a set of credentials."""

    def __init__(self, credentials: Credentials, clock: Callable[[], datetime] = utc_now) -> None:
        """Initialize the signer.

        Args:
            credentials: Credentials used for the signature.
            clock: Source of the current time. Must return timezone aware datetimes.

        """
        self._credentials = credentials
        self._clock = clock

    @property
    def credentials(self) -> Credentials:
        """Credentials used for the signature."""
        return self._credentials

    def sign(self, request: ResolvedS3Request) -> httpx.Headers:
        """Sign a request.

        A new ``Date`` is taken from the clock on every call, so signing again
        before a retry never reuses a stale timestamp.

        Returns:
            Copy of the request headers with ``Host``, ``Date``, ``Authorization``
            and, for session credentials, the security token.

        """
        headers = httpx.Headers(request.headers)
        headers["Host"] = request.host
        headers["Date"] = format_datetime(self._clock().astimezone(UTC), usegmt=True)
        if self._credentials.token:
            headers[SECURITY_TOKEN_HEADER] = self._credentials.token

        string_to_sign = canonical_string(request.method, request.sign_path, request.params, headers)
        signature = compute_signature(self._credentials.secret_key, string_to_sign)
        headers["Authorization"] = f"AWS {self._credentials.access_key}:{signature}"

        logger.debug("Signed %s %s as %r", request.method, request.sign_path, string_to_sign)
        return headers

    def presign(self, request: ResolvedS3Request, expires: datetime) -> httpx.URL:
        """Build a URL that grants access to the request until expires.

        Args:
            request: Resolved request, usually a GET.
            expires: Timezone aware expiry of the URL.

        """
        params = dict(request.params)
        params[EXPIRES_PARAM] = str(int(expires.timestamp()))
        params["AWSAccessKeyId"] = self._credentials.access_key

        headers = httpx.Headers(request.headers)
        if self._credentials.token:
            headers[SECURITY_TOKEN_HEADER] = self._credentials.token
            params[SECURITY_TOKEN_HEADER] = self._credentials.token

        string_to_sign = canonical_string(request.method, request.sign_path, params, headers)
        params["Signature"] = compute_signature(self._credentials.secret_key, string_to_sign)

        return request.url(params)
