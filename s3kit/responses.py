"""Decoding of S3 responses."""

import logging
from collections.abc import Iterator
from typing import Any
from xml.etree import ElementTree

import httpx
from pydantic import BaseModel, ValidationError

from s3kit.exceptions import (
    RESPONSE_EXCEPTIONS,
    S3DecodeClientException,
    S3ResponseClientException,
    S3TransportClientException,
)
from s3kit.models import S3ErrorDocument

logger = logging.getLogger(__name__)

SUCCESS_STATUS_CODES = frozenset({httpx.codes.OK, httpx.codes.NO_CONTENT})


def _local_name(tag: str) -> str:
    """Strip the namespace of an element tag."""
    return tag.rsplit("}", 1)[-1]


def element_to_data(element: ElementTree.Element) -> Any:
    """Convert an XML element into plain data.

    Leaves become strings. Elements with children become dictionaries keyed by
    the local child names; repeated children are collected into lists.
    """
    children = list(element)
    if not children:
        return (element.text or "").strip()

    data: dict[str, Any] = {}
    for child in children:
        name = _local_name(child.tag)
        value = element_to_data(child)
        if name not in data:
            data[name] = value
        elif isinstance(data[name], list):
            data[name].append(value)
        else:
            data[name] = [data[name], value]
    return data


def parse_xml(content: bytes) -> Any:
    """Parse an XML document into plain data.

    Raises:
        ElementTree.ParseError: If the document is malformed.

    """
    return element_to_data(ElementTree.fromstring(content))


def status_line(response: httpx.Response) -> str:
    """Return the status line of a response, e.g. ``404 Not Found``."""
    return f"{response.status_code} {response.reason_phrase}".strip()


def build_error(response: httpx.Response) -> S3ResponseClientException:
    """Build the structured error of a non-success response.

    The body is decoded as an S3 error document. If that fails, or the message
    is empty, the status line is used as the message.
    """
    document = S3ErrorDocument()
    try:
        content = response.read()
    except httpx.TransportError as error:
        logger.debug("Cannot read error document of %s response: %r", response.status_code, error)
        content = b""
    if content:
        try:
            data = parse_xml(content)
            if isinstance(data, dict):
                document = S3ErrorDocument.model_validate(data)
        except (ElementTree.ParseError, ValidationError) as error:
            logger.debug("Cannot decode error document of %s response: %s", response.status_code, error)

    exception_class = RESPONSE_EXCEPTIONS.get(document.code, S3ResponseClientException)
    error = exception_class(
        document.message or status_line(response),
        status_code=response.status_code,
        code=document.code,
        request_id=document.request_id,
        bucket_name=document.bucket_name,
        host_id=document.host_id,
    )
    logger.debug("S3 error: %r", error)
    return error


def check_response(response: httpx.Response) -> httpx.Response:
    """Return the response if it succeeded.

    Raises:
        S3ResponseClientException: If the status is neither 200 nor 204.
            The response is closed before raising.

    """
    if response.status_code in SUCCESS_STATUS_CODES:
        return response
    try:
        raise build_error(response)
    finally:
        response.close()


def read_body(response: httpx.Response) -> bytes:
    """Read the whole body of a streamed response.

    Raises:
        S3TransportClientException: If the connection fails while reading.

    """
    try:
        return response.read()
    except httpx.TransportError as error:
        raise S3TransportClientException(f"Cannot read response body: {error}") from error


def iter_body(response: httpx.Response) -> Iterator[bytes]:
    """Iterate over the body chunks of a streamed response.

    Connection failures in the middle of the body are raised as
    `S3TransportClientException`.
    """
    try:
        yield from response.iter_bytes()
    except httpx.TransportError as error:
        raise S3TransportClientException(f"Cannot read response body: {error}") from error


def decode_result[T_Model: BaseModel](response: httpx.Response, model: type[T_Model]) -> T_Model:
    """Decode the XML body of a successful response into model.

    Raises:
        S3DecodeClientException: If the body is not a valid document of the model.

    """
    try:
        return model.model_validate(parse_xml(response.read()))
    except (ElementTree.ParseError, ValidationError) as error:
        raise S3DecodeClientException(f"Cannot decode {model.__name__} from response: {error}") from error
