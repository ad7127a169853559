"""Test request signing."""

from datetime import UTC, datetime

import httpx
import pytest

from s3kit.auth.credentials import Credentials
from s3kit.auth.signer import RequestSigner, canonical_string, compute_signature
from s3kit.regions import US_EAST
from s3kit.request import EndpointResolver, ResolvedS3Request, S3Request
from tests.unit.conftest import ACCESS_KEY, FIXED_NOW, SECRET_KEY

AWS_DOC_STRING_TO_SIGN = "GET\n\n\nTue, 27 Mar 2007 19:36:42 +0000\n/johnsmith/photos/puppy.jpg"
AWS_DOC_SIGNATURE = "bWq2s1WEIj+Ydj0vQ697zp+IXMU="
EXAMPLE_KEY_SIGNATURE = "UH0FreFnCW7trs1bFy0amTnuq8o="
EXAMPLE_KEY_NEXT_SECOND_SIGNATURE = "cC60+NCC+fdtoJNXFfb4GkfQRtk="
EXAMPLE_KEY_SESSION_SIGNATURE = "rdgdvOCHaT6j+8sGkZJLSCIOiJ4="
AWS_DOC_PRESIGNED_SIGNATURE = "NpgCjnDzrM+WFzoENXmpNDUsSn8="
AWS_DOC_EXPIRES = datetime(2007, 3, 29, 3, 40, 20, tzinfo=UTC)


def _resolve(bucket: str, path: str) -> ResolvedS3Request:
    return EndpointResolver(US_EAST).resolve(S3Request(bucket=bucket, path=path))


def test_compute_signature_matches_aws_documentation() -> None:
    """Test the HMAC-SHA1 signature of the AWS documentation example."""
    assert compute_signature(SECRET_KEY, AWS_DOC_STRING_TO_SIGN) == AWS_DOC_SIGNATURE


def test_canonical_string_of_plain_get() -> None:
    """Test the string to sign of a GET without content headers."""
    result = canonical_string(
        "GET", "/johnsmith/photos/puppy.jpg", {}, {"Date": "Tue, 27 Mar 2007 19:36:42 +0000", "Host": "ignored"}
    )

    assert result == AWS_DOC_STRING_TO_SIGN


def test_canonical_string_with_amz_headers_and_sub_resources() -> None:
    """Test x-amz-* grouping and sorting and sub-resource selection."""
    headers = httpx.Headers(
        [
            ("Content-MD5", "4gJE4saaMU4BqNR0kLY+lw=="),
            ("Content-Type", "image/jpeg"),
            ("Date", "Tue, 27 Mar 2007 21:15:45 +0000"),
            ("X-Amz-Meta-ChecksumAlgorithm", "crc32"),
            ("x-amz-meta-checksumalgorithm", "md5"),
            ("x-amz-acl", "public-read"),
        ]
    )
    params = {"versionId": "3", "acl": "", "prefix": "not-signed"}

    result = canonical_string("PUT", "/example/photos/puppy.jpg", params, headers)

    assert result == (
        "PUT\n"
        "4gJE4saaMU4BqNR0kLY+lw==\n"
        "image/jpeg\n"
        "Tue, 27 Mar 2007 21:15:45 +0000\n"
        "x-amz-acl:public-read\n"
        "x-amz-meta-checksumalgorithm:crc32,md5\n"
        "/example/photos/puppy.jpg?acl&versionId=3"
    )
    assert compute_signature(SECRET_KEY, result) == "L0d8nugpDLHJnmZP9d5jNhMErio="


def test_canonical_string_blanks_date_when_amz_date_is_set() -> None:
    """Test the date line is empty when x-amz-date carries the date."""
    headers = {"Date": "Tue, 27 Mar 2007 19:36:42 +0000", "x-amz-date": "Tue, 27 Mar 2007 19:36:42 +0000"}

    result = canonical_string("GET", "/example/key", {}, headers)

    assert result == "GET\n\n\n\nx-amz-date:Tue, 27 Mar 2007 19:36:42 +0000\n/example/key"


def test_canonical_string_uses_expires_instead_of_date() -> None:
    """Test the Expires parameter replaces the date line."""
    result = canonical_string("GET", "/example/key", {"Expires": "1175139620"}, {"Date": "ignored"})

    assert result == "GET\n\n\n1175139620\n/example/key"


def test_sign_path_style_request(credentials: Credentials) -> None:
    """Test the headers of a signed path-style GET."""
    signer = RequestSigner(credentials, clock=lambda: FIXED_NOW)

    request = _resolve("example", "/key")

    headers = signer.sign(request)

    assert canonical_string(request.method, request.sign_path, request.params, headers) == (
        "GET\n\n\nTue, 27 Mar 2007 19:36:42 GMT\n/example/key"
    )
    assert headers["Host"] == "s3.amazonaws.com"
    assert headers["Date"] == "Tue, 27 Mar 2007 19:36:42 GMT"
    assert headers["Authorization"] == f"AWS {ACCESS_KEY}:{EXAMPLE_KEY_SIGNATURE}"


def test_sign_is_deterministic(credentials: Credentials) -> None:
    """Test signing twice at the same instant gives the same signature."""
    signer = RequestSigner(credentials, clock=lambda: FIXED_NOW)
    request = _resolve("example", "/key")

    assert signer.sign(request)["Authorization"] == signer.sign(request)["Authorization"]


def test_sign_depends_on_date(credentials: Credentials) -> None:
    """Test signing one second later changes the signature."""
    later = datetime(2007, 3, 27, 19, 36, 43, tzinfo=UTC)
    signer = RequestSigner(credentials, clock=lambda: later)

    headers = signer.sign(_resolve("example", "/key"))

    assert headers["Authorization"] == f"AWS {ACCESS_KEY}:{EXAMPLE_KEY_NEXT_SECOND_SIGNATURE}"
    assert EXAMPLE_KEY_NEXT_SECOND_SIGNATURE != EXAMPLE_KEY_SIGNATURE


def test_sign_does_not_modify_request(credentials: Credentials) -> None:
    """Test the resolved request keeps its headers after signing."""
    signer = RequestSigner(credentials, clock=lambda: FIXED_NOW)
    request = _resolve("example", "/key")

    signer.sign(request)

    assert "Authorization" not in request.headers
    assert "Date" not in request.headers


def test_sign_with_session_token() -> None:
    """Test session credentials add and sign the security token header."""
    credentials = Credentials(access_key=ACCESS_KEY, secret_key=SECRET_KEY, token="session-token")
    signer = RequestSigner(credentials, clock=lambda: FIXED_NOW)

    headers = signer.sign(_resolve("example", "/key"))

    assert headers["x-amz-security-token"] == "session-token"
    assert headers["Authorization"] == f"AWS {ACCESS_KEY}:{EXAMPLE_KEY_SESSION_SIGNATURE}"


def test_presign_matches_aws_documentation(credentials: Credentials) -> None:
    """Test the pre-signed URL of the AWS documentation example."""
    signer = RequestSigner(credentials, clock=lambda: FIXED_NOW)

    url = signer.presign(_resolve("johnsmith", "/photos/puppy.jpg"), AWS_DOC_EXPIRES)

    assert url.host == "s3.amazonaws.com"
    assert url.path == "/johnsmith/photos/puppy.jpg"
    assert url.params["AWSAccessKeyId"] == ACCESS_KEY
    assert url.params["Expires"] == "1175139620"
    assert url.params["Signature"] == AWS_DOC_PRESIGNED_SIGNATURE


def test_presign_with_session_token() -> None:
    """Test the security token is carried by pre-signed URLs."""
    credentials = Credentials(access_key=ACCESS_KEY, secret_key=SECRET_KEY, token="session-token")
    signer = RequestSigner(credentials)

    url = signer.presign(_resolve("johnsmith", "/photos/puppy.jpg"), AWS_DOC_EXPIRES)

    assert url.params["x-amz-security-token"] == "session-token"
    assert url.params["Signature"] != AWS_DOC_PRESIGNED_SIGNATURE


@pytest.mark.parametrize("path", ["/key", "/nested/key.txt"])
def test_signature_verifies_with_canonical_string(credentials: Credentials, path: str) -> None:
    """Test the Authorization header is the signature of the canonical string of the sent headers."""
    signer = RequestSigner(credentials, clock=lambda: FIXED_NOW)
    request = _resolve("example", path)

    headers = signer.sign(request)

    expected = compute_signature(SECRET_KEY, canonical_string("GET", "/example" + path, {}, headers))
    assert headers["Authorization"] == f"AWS {ACCESS_KEY}:{expected}"
