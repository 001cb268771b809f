import logging

from .config import (
    DEFAULT_NETWORKS,
    DispatchPolicy,
    NetworkConfig,
    NetworkType,
    ProviderConfig,
    __version__,
    get_network_config,
    load_config,
    load_networks,
)
from .decoder import decode_balance, decode_quantity, encode_quantity, format_units, validate_address
from .errors import (
    AllEndpointsUnreachableError,
    CallCancelledError,
    ConfigurationError,
    ConsistencyError,
    DeadlineExceededError,
    DecodeError,
    DuplicateNameError,
    EndpointConnectionError,
    EndpointTimeoutError,
    EndpointUnavailableError,
    InconsistentResponseError,
    InvalidAddressError,
    InvalidEndpointError,
    MalformedQuantityError,
    NoEndpointsConfiguredError,
    ProtocolError,
    ProviderError,
    TransportError,
    ValidationError,
)
from .models import Balance, Endpoint
from .provider import Provider

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "Provider",
    "ProviderConfig",
    "DispatchPolicy",
    "NetworkConfig",
    "NetworkType",
    "DEFAULT_NETWORKS",
    "get_network_config",
    "load_config",
    "load_networks",
    "Balance",
    "Endpoint",
    "decode_balance",
    "decode_quantity",
    "encode_quantity",
    "format_units",
    "validate_address",
    "ProviderError",
    "ConfigurationError",
    "DuplicateNameError",
    "InvalidEndpointError",
    "NoEndpointsConfiguredError",
    "ValidationError",
    "InvalidAddressError",
    "DecodeError",
    "MalformedQuantityError",
    "TransportError",
    "EndpointTimeoutError",
    "EndpointConnectionError",
    "EndpointUnavailableError",
    "AllEndpointsUnreachableError",
    "ProtocolError",
    "ConsistencyError",
    "InconsistentResponseError",
    "CallCancelledError",
    "DeadlineExceededError",
]
