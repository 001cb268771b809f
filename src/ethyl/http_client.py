import logging
from typing import Any, Dict

import requests
from requests.adapters import HTTPAdapter

from .errors import EndpointConnectionError, EndpointTimeoutError, EndpointUnavailableError, ProtocolError
from .models import MALFORMED_RESPONSE

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = (429, 500, 502, 503, 504)


class HttpClient:
    """Blocking JSON-RPC transport over a pooled ``requests.Session``.

    Retries are not done here; every failure is mapped to a typed error and
    the dispatcher decides whether to try again.
    """

    def __init__(self, user_agent: str, pool_maxsize: int = 16) -> None:
        self.session = requests.Session()
        adapter = HTTPAdapter(max_retries=0, pool_connections=4, pool_maxsize=pool_maxsize)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)
        self.session.headers.update({"User-Agent": user_agent, "Content-Type": "application/json"})

    def post_json(self, url: str, payload: Dict[str, Any], timeout: float) -> Any:
        try:
            response = self.session.post(url, json=payload, timeout=timeout)
        except requests.Timeout as exc:
            raise EndpointTimeoutError("RPC request timed out", endpoint=url, cause=exc) from exc
        except requests.ConnectionError as exc:
            raise EndpointConnectionError("RPC connection failed", endpoint=url, cause=exc) from exc
        except requests.RequestException as exc:
            raise EndpointConnectionError("RPC request failed", endpoint=url, cause=exc) from exc

        with response:
            status = response.status_code
            if status in RETRYABLE_STATUSES:
                raise EndpointUnavailableError("RPC endpoint unavailable", http_status=status, endpoint=url)

            try:
                body = response.json()
            except ValueError:
                logger.debug(f"Invalid JSON from {url}: {response.text[:200]!r}")
                raise ProtocolError(
                    MALFORMED_RESPONSE,
                    f"response was not valid JSON (status={status})",
                    endpoint=url,
                ) from None

        if status >= 400 and not (isinstance(body, dict) and ("error" in body or "result" in body)):
            raise ProtocolError(MALFORMED_RESPONSE, f"RPC request returned status {status}", data=body, endpoint=url)
        return body

    def close(self) -> None:
        self.session.close()
