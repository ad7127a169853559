"""Pydantic S3 response models.

Field names follow python conventions; aliases match the XML element names.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_pascal


def _ensure_list(value: Any) -> Any:
    """Wrap a single repeated XML element into a list."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def _prefixes(value: Any) -> Any:
    """Flatten ``<CommonPrefixes><Prefix>p</Prefix></CommonPrefixes>`` elements."""
    return [item.get("Prefix", "") if isinstance(item, dict) else item for item in _ensure_list(value)]


def _empty_to_none(value: Any) -> Any:
    """Treat an empty element such as ``<Owner/>`` as absent."""
    return None if value == "" else value


class S3Model(BaseModel):
    """Base model for documents sent by S3."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="ignore")


class S3Owner(S3Model):
    """Owner of an object in a bucket."""

    id: str = Field(default="", alias="ID")
    display_name: str = ""


class S3Key(S3Model):
    """Object listed in a bucket."""

    key: str
    last_modified: Annotated[datetime | None, BeforeValidator(_empty_to_none)] = None
    size: int = 0
    etag: str = Field(default="", alias="ETag")
    storage_class: str = ""
    owner: Annotated[S3Owner | None, BeforeValidator(_empty_to_none)] = None


class S3ListResponse(S3Model):
    """Result of a List bucket operation.

    `is_truncated` is true if the results have been truncated because there
    are more keys and prefixes than can fit in `max_keys`.
    """

    name: str = ""
    prefix: str = ""
    delimiter: str = ""
    marker: str = ""
    next_marker: str = ""
    max_keys: int = 0
    is_truncated: bool = False
    contents: Annotated[list[S3Key], BeforeValidator(_ensure_list)] = Field(default_factory=list)
    common_prefixes: Annotated[list[str], BeforeValidator(_prefixes)] = Field(default_factory=list)


class S3ErrorDocument(S3Model):
    """Error document returned with non-success responses."""

    code: str = ""
    message: str = ""
    bucket_name: str = ""
    request_id: str = ""
    host_id: str = ""


class InstanceRoleCredentials(S3Model):
    """Credentials of an instance role, as served by the instance metadata service."""

    code: str = ""
    last_updated: str = ""
    type: str = ""
    access_key_id: str
    secret_access_key: str
    token: str = ""
    expiration: str = ""
