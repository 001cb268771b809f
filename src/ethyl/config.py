from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .errors import ConfigurationError

__version__ = "0.3.0"


class DispatchPolicy(str, Enum):
    """How a call is spread over the registered endpoints.

    FIRST_SUCCESS walks endpoints in registration order and returns the first
    good answer. CONFIRM_ALL asks every endpoint at once and only returns when
    all successful answers agree.
    """

    FIRST_SUCCESS = "first_success"
    CONFIRM_ALL = "confirm_all"

    def __str__(self) -> str:
        return self.value


class NetworkType(str, Enum):
    LOCAL = "local"
    TESTNET = "testnet"
    MAINNET = "mainnet"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProviderConfig:
    timeout_ms: int = 10_000
    max_retries: int = 1
    retry_backoff: float = 0.2
    policy: DispatchPolicy = DispatchPolicy.FIRST_SUCCESS
    max_workers: int = 8
    user_agent: str = f"ethyl/{__version__}"

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "policy", DispatchPolicy(self.policy))
        except ValueError:
            raise ConfigurationError(f"unknown dispatch policy: {self.policy!r}") from None
        if self.timeout_ms <= 0:
            raise ConfigurationError(f"timeout_ms must be positive, got {self.timeout_ms}")
        if self.max_retries < 0:
            raise ConfigurationError(f"max_retries must not be negative, got {self.max_retries}")
        if self.retry_backoff < 0:
            raise ConfigurationError(f"retry_backoff must not be negative, got {self.retry_backoff}")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000.0

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> "ProviderConfig":
        mapping = dict(mapping or {})
        unknown = set(mapping) - {"timeout_ms", "max_retries", "retry_backoff", "policy", "max_workers", "user_agent"}
        if unknown:
            raise ConfigurationError(f"unknown provider options: {', '.join(sorted(unknown))}")
        try:
            return cls(**mapping)
        except TypeError as exc:
            raise ConfigurationError(f"invalid provider options: {exc}") from exc


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    rpc_url: str
    chain_id: Optional[int] = None


DEFAULT_NETWORKS: Dict[NetworkType, NetworkConfig] = {
    NetworkType.LOCAL: NetworkConfig(name="Local Client", rpc_url="http://127.0.0.1:8545", chain_id=31337),
    NetworkType.TESTNET: NetworkConfig(
        name="Arbitrum Sepolia", rpc_url="https://sepolia-rollup.arbitrum.io/rpc", chain_id=421614
    ),
    NetworkType.MAINNET: NetworkConfig(name="Arbitrum One", rpc_url="https://arb1.arbitrum.io/rpc", chain_id=42161),
}


def get_network_config(
    network_type: Union[NetworkType, str],
    networks: Optional[Mapping[NetworkType, NetworkConfig]] = None,
) -> NetworkConfig:
    try:
        key = NetworkType(network_type)
    except ValueError:
        raise ConfigurationError(f"unknown network type: {network_type!r}") from None

    table = DEFAULT_NETWORKS if networks is None else networks
    if key not in table:
        raise ConfigurationError(f"no configuration for network {key}")
    return table[key]


def load_config(config_path: Path) -> Dict[str, Any]:
    try:
        with Path(config_path).open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigurationError(f"cannot read config {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"config {config_path} is not valid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"config {config_path} must be a mapping at the top level")
    return data


def load_networks(mapping: Optional[Mapping[str, Any]]) -> Dict[NetworkType, NetworkConfig]:
    """Build network entries from a ``networks:`` section, on top of the defaults.

    Each entry needs ``rpc_url``; ``name`` and ``chain_id`` fall back to the
    built-in entry for that network type when present.
    """
    networks = dict(DEFAULT_NETWORKS)
    for raw_type, entry in (mapping or {}).items():
        try:
            network_type = NetworkType(raw_type)
        except ValueError:
            raise ConfigurationError(f"unknown network type: {raw_type!r}") from None
        if not isinstance(entry, dict) or not entry.get("rpc_url"):
            raise ConfigurationError(f"network {network_type} needs an rpc_url")

        base = DEFAULT_NETWORKS.get(network_type)
        chain_id = entry.get("chain_id", base.chain_id if base else None)
        if chain_id is not None and not isinstance(chain_id, int):
            raise ConfigurationError(f"network {network_type} chain_id must be an integer")
        networks[network_type] = NetworkConfig(
            name=str(entry.get("name") or (base.name if base else network_type.value)),
            rpc_url=str(entry["rpc_url"]),
            chain_id=chain_id,
        )
    return networks
