import logging
import requests
from typing import Dict, Any, Optional

from .errors import TransportError


class HTTPTransport:
    """
    Thin requests wrapper shared by the REST-based providers.

    Every failure (connection error, timeout, non-2xx status, non-JSON body)
    surfaces as TransportError tagged with the provider name. Retries are
    not attempted here.
    """

    def __init__(
        self,
        provider: str,
        base_url: str = "",
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers or {})
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    def url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = self.url(path)
        headers = {**self.headers, **kwargs.pop("headers", {})}
        timeout = kwargs.pop("timeout", self.timeout)

        self.logger.debug("%s %s request %s", self.provider, method, url)

        try:
            response = self.session.request(method, url, headers=headers, timeout=timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"{self.provider} request timed out: {e}", provider=self.provider) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{self.provider} request failed: {e}", provider=self.provider) from e

        self.logger.debug("%s %s response %s", self.provider, method, response.status_code)

        if not response.ok:
            raise TransportError(
                f"{self.provider} error (HTTP {response.status_code}): {self._error_detail(response)}",
                provider=self.provider,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"{self.provider} returned a non-JSON response: {e}",
                provider=self.provider,
                status_code=response.status_code,
            ) from e

    def get(self, path: str, **kwargs) -> Dict[str, Any]:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Dict[str, Any]:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> Dict[str, Any]:
        return self.request("PUT", path, **kwargs)

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason or "Unknown error"

        if isinstance(body, dict):
            detail = body.get("message") or body.get("error") or body.get("detail")
            if isinstance(detail, dict):
                detail = detail.get("message") or str(detail)
            if detail:
                return str(detail)
        return str(body)
