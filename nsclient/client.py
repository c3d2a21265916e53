from typing import Any, Optional
import os
import json

try:
    import httpx
except ModuleNotFoundError as exc:  # pragma: no cover - user environment dependency
    raise ModuleNotFoundError(
        "Missing dependency 'httpx'. Install with: pip install httpx"
    ) from exc

from endpoints import BASE_URL
from .utils import append_log_line, env_float, get_logger, http_log_path, truncate_text


class StorageClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        http_log: Optional[str] = None,
    ):
        self.base_url = (base_url or os.getenv("NSCLIENT_BASE_URL") or BASE_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else env_float("NSCLIENT_TIMEOUT", 30.0)
        self.logger = get_logger('nsclient')
        self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=transport)
        self.http_log_path = http_log or http_log_path()

    def _log_request(self, method: str, url: str, kwargs: dict) -> None:
        self.logger.debug('HTTP %s %s params=%s', method, url, kwargs.get("params"))
        if "json" in kwargs:
            append_log_line(self.http_log_path, f"{method} {url} payload={json.dumps(kwargs['json'])}")
        else:
            append_log_line(self.http_log_path, f"{method} {url} params={kwargs.get('params')}")

    def _log_response(self, method: str, url: str, resp: httpx.Response) -> None:
        content_type = resp.headers.get("content-type", "")
        if "json" in content_type or "text" in content_type:
            body = truncate_text(resp.text or "")
        else:
            body = f"<{content_type or 'binary'}>"
        self.logger.debug('HTTP %s %s status=%s', method, url, resp.status_code)
        append_log_line(self.http_log_path, f"{method} {url} status={resp.status_code} response={body}")

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = path if path.startswith('http') else f"{self.base_url}{path}"
        self._log_request(method, url, kwargs)
        resp = self._client.request(method, url, **kwargs)
        self._log_response(method, url, resp)
        return resp

    def stream(self, method: str, path: str, **kwargs: Any):
        url = path if path.startswith('http') else f"{self.base_url}{path}"
        self._log_request(method, url, kwargs)
        return self._client.stream(method, url, **kwargs)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "StorageClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
