"""S3 config."""

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings

from s3kit.configs.retry import AttemptStrategyConfig, ResilientTransportConfig


class S3Config(BaseSettings):
    """S3 configuration.

    This config is used to configure the S3 client.

    Attributes:
        aws_access_key_id (str | None): The AWS access key ID for authenticating API requests.
            Can be set via AWS_ACCESS_KEY_ID environment variable. If None, the environment
            and then the instance role are consulted.
        aws_secret_access_key (str | None): The AWS secret access key for authenticating API requests.
            Can be set via AWS_SECRET_ACCESS_KEY environment variable.
        aws_session_token (str | None): The AWS session token for temporary credentials.
            Can be set via AWS_SESSION_TOKEN environment variable. Defaults to None.
        aws_region (str): The AWS region where the S3 bucket is located.
            Can be set via AWS_REGION environment variable. Defaults to 'us-east-1'.
        endpoint_url (AnyHttpUrl | None): The complete URL to the S3 service.
            Useful for S3-compatible services (e.g., MinIO, LocalStack). Buckets are then
            addressed path-style. Default is None, which uses the region endpoint.
        use_instance_metadata (bool): Whether to look up the instance role credentials
            when no other source provides them. Defaults to True.
        attempts (AttemptStrategyConfig): Retries of whole bucket operations.
        transport (ResilientTransportConfig): Retries of single HTTP exchanges.

    """

    aws_access_key_id: str | None = Field(
        default=None, description="The AWS access key ID for authenticating API requests."
    )
    aws_secret_access_key: str | None = Field(
        default=None, description="The AWS secret access key for authenticating API requests."
    )
    aws_session_token: str | None = Field(default=None, description="The AWS session token for temporary credentials.")
    aws_region: str = Field(
        default="us-east-1", description="The AWS region where the S3 bucket is located (e.g., 'us-east-1')."
    )
    endpoint_url: AnyHttpUrl | None = Field(
        default=None,
        description="The complete URL to the S3 service. Useful for custom endpoints or S3-compatible services.",
    )
    use_instance_metadata: bool = Field(
        default=True, description="Whether to look up the instance role credentials as a last resort."
    )
    attempts: AttemptStrategyConfig = Field(default_factory=AttemptStrategyConfig)
    transport: ResilientTransportConfig = Field(default_factory=ResilientTransportConfig)
