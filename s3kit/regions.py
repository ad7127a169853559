"""S3 region endpoints."""

from dataclasses import dataclass

from s3kit.exceptions import S3UnknownRegionClientException

BUCKET_PLACEHOLDER = "${bucket}"


@dataclass(frozen=True)
class EndpointConfig:
    """Endpoints where S3 may be accessed in a region.

    Attributes:
        name: The canonical name of the region.
        service_endpoint: Account level endpoint, also used for path-style addressing.
        virtual_hosted_endpoint_template: Endpoint with a ``${bucket}`` placeholder.
            Empty when the region is addressed path-style.
        requires_location_constraint: Whether bucket creation must declare a LocationConstraint.
        force_lowercase_bucket_names: Whether the region requires lower case bucket names.

    """

    name: str
    service_endpoint: str
    virtual_hosted_endpoint_template: str = ""
    requires_location_constraint: bool = False
    force_lowercase_bucket_names: bool = False


US_EAST = EndpointConfig(name="us-east-1", service_endpoint="https://s3.amazonaws.com")

US_WEST = EndpointConfig(
    name="us-west-1",
    service_endpoint="https://s3-us-west-1.amazonaws.com",
    requires_location_constraint=True,
    force_lowercase_bucket_names=True,
)

US_WEST_2 = EndpointConfig(
    name="us-west-2",
    service_endpoint="https://s3-us-west-2.amazonaws.com",
    requires_location_constraint=True,
    force_lowercase_bucket_names=True,
)

EU_WEST = EndpointConfig(
    name="eu-west-1",
    service_endpoint="https://s3-eu-west-1.amazonaws.com",
    requires_location_constraint=True,
    force_lowercase_bucket_names=True,
)

AP_SOUTHEAST = EndpointConfig(
    name="ap-southeast-1",
    service_endpoint="https://s3-ap-southeast-1.amazonaws.com",
    requires_location_constraint=True,
    force_lowercase_bucket_names=True,
)

AP_SOUTHEAST_2 = EndpointConfig(
    name="ap-southeast-2",
    service_endpoint="https://s3-ap-southeast-2.amazonaws.com",
    requires_location_constraint=True,
    force_lowercase_bucket_names=True,
)

AP_NORTHEAST = EndpointConfig(
    name="ap-northeast-1",
    service_endpoint="https://s3-ap-northeast-1.amazonaws.com",
    requires_location_constraint=True,
    force_lowercase_bucket_names=True,
)

SA_EAST = EndpointConfig(
    name="sa-east-1",
    service_endpoint="https://s3-sa-east-1.amazonaws.com",
    requires_location_constraint=True,
    force_lowercase_bucket_names=True,
)

REGIONS: dict[str, EndpointConfig] = {
    region.name: region
    for region in (AP_NORTHEAST, AP_SOUTHEAST, AP_SOUTHEAST_2, EU_WEST, US_EAST, US_WEST, US_WEST_2, SA_EAST)
}


def get_region(name: str) -> EndpointConfig:
    """Get the endpoint config of a region by name.

    Raises:
        S3UnknownRegionClientException: If the region is not known.

    """
    try:
        return REGIONS[name]
    except KeyError:
        raise S3UnknownRegionClientException(f"Unknown S3 region {name!r}") from None
