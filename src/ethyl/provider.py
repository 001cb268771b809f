import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Optional, Tuple, Union

from .config import NetworkConfig, ProviderConfig
from .decoder import block_tag, decode_balance, decode_data, decode_quantity, validate_address
from .dispatcher import Decoder, Dispatcher
from .http_client import HttpClient
from .models import Endpoint, RpcRequest
from .registry import EndpointRegistry

logger = logging.getLogger(__name__)

BlockId = Union[str, int]


class Provider:
    def __init__(self, config: Optional[ProviderConfig] = None, transport: Any = None) -> None:
        self.config = config or ProviderConfig()
        self._owns_transport = transport is None
        self._transport = transport or HttpClient(
            user_agent=self.config.user_agent, pool_maxsize=max(16, self.config.max_workers)
        )
        self._registry = EndpointRegistry()
        self._ids = itertools.count(1)
        self._ids_lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()
        self._dispatcher = Dispatcher(self._registry, self._transport, self.config, self._get_executor)

    @classmethod
    def from_network(
        cls, network: NetworkConfig, config: Optional[ProviderConfig] = None, transport: Any = None
    ) -> "Provider":
        provider = cls(config=config, transport=transport)
        provider.add_client(network.name, network.rpc_url)
        return provider

    def __enter__(self) -> "Provider":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)
        if self._owns_transport:
            self._transport.close()

    def add_client(self, name: str, url: str) -> Endpoint:
        return self._registry.add(name, url)

    def clients(self) -> Tuple[Endpoint, ...]:
        return self._registry.list()

    def call(
        self,
        method: str,
        params: Optional[List[Any]] = None,
        deadline: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Any:
        return self._request(method, list(params or []), None, deadline, cancel)

    def get_balance(
        self,
        address: str,
        block: BlockId = "latest",
        deadline: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        params = [validate_address(address), block_tag(block)]
        balance = self._request("eth_getBalance", params, decode_balance, deadline, cancel)
        return balance.value

    def get_transaction_count(self, address: str, block: BlockId = "latest") -> int:
        params = [validate_address(address), block_tag(block)]
        return self._request("eth_getTransactionCount", params, decode_quantity)

    def get_code(self, address: str, block: BlockId = "latest") -> str:
        params = [validate_address(address), block_tag(block)]
        return self._request("eth_getCode", params, decode_data)

    def get_block_number(self) -> int:
        return self._request("eth_blockNumber", [], decode_quantity)

    def get_chain_id(self) -> int:
        return self._request("eth_chainId", [], decode_quantity)

    def get_gas_price(self) -> int:
        return self._request("eth_gasPrice", [], decode_quantity)

    def _request(
        self,
        method: str,
        params: List[Any],
        decode: Optional[Decoder],
        deadline: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Any:
        request = RpcRequest(method=method, params=params, id=self._next_id())
        return self._dispatcher.dispatch(request, decode=decode, deadline=deadline, cancel=cancel)

    def _next_id(self) -> int:
        with self._ids_lock:
            return next(self._ids)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.max_workers, thread_name_prefix="ethyl-dispatch"
                )
                logger.debug(f"Started dispatch pool with {self.config.max_workers} workers")
            return self._executor
