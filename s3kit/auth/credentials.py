"""AWS credentials and their resolution chain."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from s3kit.auth.metadata import InstanceMetadataClient
from s3kit.exceptions import S3ClientException, S3CredentialsNotFoundClientException

logger = logging.getLogger(__name__)

ACCESS_KEY_VARIABLES = ("AWS_ACCESS_KEY_ID", "AWS_ACCESS_KEY")
SECRET_KEY_VARIABLES = ("AWS_SECRET_ACCESS_KEY", "AWS_SECRET_KEY")
TOKEN_VARIABLES = ("AWS_SESSION_TOKEN", "AWS_SECURITY_TOKEN")


@dataclass(frozen=True)
class Credentials:
    """Access key, secret key and optional session token."""

    access_key: str
    secret_key: str
    token: str = ""

    def __repr__(self) -> str:
        """Return the representation without the secret parts."""
        token = "'***'" if self.token else "''"
        return f"Credentials(access_key={self.access_key!r}, secret_key='***', token={token})"


def _first_set(environ: Mapping[str, str], names: tuple[str, ...]) -> str:
    for name in names:
        value = environ.get(name, "")
        if value:
            return value
    return ""


def env_credentials(environ: Mapping[str, str] | None = None) -> Credentials:
    """Read credentials from the environment.

    ``AWS_ACCESS_KEY_ID`` (or ``AWS_ACCESS_KEY``) and ``AWS_SECRET_ACCESS_KEY``
    (or ``AWS_SECRET_KEY``) are required. ``AWS_SESSION_TOKEN`` (or
    ``AWS_SECURITY_TOKEN``) is optional.

    Args:
        environ: Environment to read from. Defaults to ``os.environ``.

    Raises:
        S3CredentialsNotFoundClientException: If a required variable is missing.

    """
    environ = os.environ if environ is None else environ

    access_key = _first_set(environ, ACCESS_KEY_VARIABLES)
    if not access_key:
        raise S3CredentialsNotFoundClientException("AWS_ACCESS_KEY_ID or AWS_ACCESS_KEY not found in environment")

    secret_key = _first_set(environ, SECRET_KEY_VARIABLES)
    if not secret_key:
        raise S3CredentialsNotFoundClientException(
            "AWS_SECRET_ACCESS_KEY or AWS_SECRET_KEY not found in environment"
        )

    return Credentials(access_key=access_key, secret_key=secret_key, token=_first_set(environ, TOKEN_VARIABLES))


def instance_credentials(metadata_client: InstanceMetadataClient) -> Credentials:
    """Read the credentials of the instance role from the metadata service."""
    role_credentials = metadata_client.get_role_credentials()
    return Credentials(
        access_key=role_credentials.access_key_id,
        secret_key=role_credentials.secret_access_key,
        token=role_credentials.token,
    )


def get_credentials(
    access_key: str | None = None,
    secret_key: str | None = None,
    token: str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    metadata_client: InstanceMetadataClient | None = None,
) -> Credentials:
    """Resolve credentials from explicit values, the environment or the instance role.

    Sources are tried in that order and the first complete one wins.

    Args:
        access_key: Explicit access key.
        secret_key: Explicit secret key.
        token: Explicit session token, used only with explicit keys.
        environ: Environment to read from. Defaults to ``os.environ``.
        metadata_client: Client of the instance metadata service.
            If None, the instance role is not consulted.

    Raises:
        S3CredentialsNotFoundClientException: If no source provides credentials.

    """
    if access_key and secret_key:
        logger.debug("Using explicitly passed credentials")
        return Credentials(access_key=access_key, secret_key=secret_key, token=token or "")

    try:
        credentials = env_credentials(environ)
    except S3CredentialsNotFoundClientException as error:
        logger.debug("No credentials in environment: %s", error)
    else:
        logger.info("Using credentials from environment")
        return credentials

    if metadata_client is not None:
        try:
            credentials = instance_credentials(metadata_client)
        except S3ClientException as error:
            logger.debug("No credentials from instance metadata: %s", error)
        else:
            logger.info("Using credentials of the instance role")
            return credentials

    raise S3CredentialsNotFoundClientException("No valid AWS authentication found")
