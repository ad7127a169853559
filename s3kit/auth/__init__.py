"""Credentials and request signing."""

from s3kit.auth.credentials import Credentials, env_credentials, get_credentials, instance_credentials
from s3kit.auth.metadata import InstanceMetadataClient
from s3kit.auth.signer import RequestSigner, canonical_string, compute_signature

__all__ = [
    "Credentials",
    "InstanceMetadataClient",
    "RequestSigner",
    "canonical_string",
    "compute_signature",
    "env_credentials",
    "get_credentials",
    "instance_credentials",
]
