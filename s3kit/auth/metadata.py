"""Instance metadata service client."""

import logging

import httpx
from pydantic import ValidationError

from s3kit.exceptions import S3MetadataClientException, S3TransportClientException
from s3kit.models import InstanceRoleCredentials

logger = logging.getLogger(__name__)

METADATA_URL = "http://169.254.169.254/latest/meta-data/"
CREDENTIALS_PATH = "iam/security-credentials/"


class InstanceMetadataClient:
    """Reads instance metadata about the current machine.

    See http://docs.aws.amazon.com/AWSEC2/latest/UserGuide/AESDG-chapter-instancedata.html
    """

    def __init__(self, http_client: httpx.Client, base_url: str = METADATA_URL) -> None:
        """Initialize the client.

        Args:
            http_client: HTTP client used for the metadata requests.
                Usually built with `s3kit.transport.resilient.new_http_client`.
            base_url: Root of the metadata tree.

        """
        self._http_client = http_client
        self._base_url = base_url

    def get(self, path: str) -> bytes:
        """Get the raw metadata stored at path.

        Raises:
            S3TransportClientException: If the service cannot be reached.
            S3MetadataClientException: If the service does not answer with 200.

        """
        url = self._base_url + path
        try:
            response = self._http_client.get(url)
        except httpx.TransportError as error:
            raise S3TransportClientException(f"Cannot reach instance metadata at {url}: {error}") from error

        if response.status_code != httpx.codes.OK:
            raise S3MetadataClientException(f"Code {response.status_code} returned for url {url}")

        return response.content

    def get_role_credentials(self) -> InstanceRoleCredentials:
        """Get the credentials of the instance role.

        Raises:
            S3MetadataClientException: If there is no role or its credentials are malformed.

        """
        role = self.get(CREDENTIALS_PATH).decode().strip()
        if not role:
            raise S3MetadataClientException("No instance role is attached")

        logger.debug("Fetching credentials of instance role %s", role)
        payload = self.get(CREDENTIALS_PATH + role)
        try:
            return InstanceRoleCredentials.model_validate_json(payload)
        except ValidationError as error:
            raise S3MetadataClientException(f"Malformed credentials of instance role {role}") from error
