"""Client for the S3 REST API with signature version 2 and resilient delivery."""

from s3kit.auth.credentials import Credentials, get_credentials
from s3kit.client import ACL, S3, Bucket
from s3kit.configs.s3 import S3Config
from s3kit.exceptions import (
    S3AddressingClientException,
    S3ClientException,
    S3CredentialsNotFoundClientException,
    S3DecodeClientException,
    S3ResponseClientException,
    S3TransportClientException,
)
from s3kit.regions import REGIONS, EndpointConfig, get_region
from s3kit.request import EndpointResolver, ResolvedS3Request, S3Request

__all__ = [
    "ACL",
    "REGIONS",
    "S3",
    "Bucket",
    "Credentials",
    "EndpointConfig",
    "EndpointResolver",
    "ResolvedS3Request",
    "S3AddressingClientException",
    "S3ClientException",
    "S3Config",
    "S3CredentialsNotFoundClientException",
    "S3DecodeClientException",
    "S3Request",
    "S3ResponseClientException",
    "S3TransportClientException",
    "get_credentials",
    "get_region",
]
