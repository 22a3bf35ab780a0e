from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import httpx
import orjson

from .config import CdsConfig
from .constants import (
    ACTION_CATALOG_PUBLISH,
    ACTION_DISCOVER,
    API_KEY_HEADER,
    DEFAULT_BAP_ID,
    DEFAULT_BAP_URI,
    DEFAULT_BPP_ID,
    DEFAULT_BPP_URI,
    DEFAULT_TIMEOUT,
    DISCOVER_PATH,
    PUBLISH_PATH,
)
from .context import build_context
from .discovery import DiscoverQuery, build_discover_message
from .errors import NoKeyLoadedError, SigningFailureError
from .http_sig import sign_request
from .jsonutil import dumps_body, try_parse_json
from .response_filter import filter_response
from .security.keystore import KeyStore

_log = logging.getLogger(__name__)


@dataclass
class CdsResult:
    success: bool
    request_body: Dict[str, Any]
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    status_code: Optional[int] = None
    signed: bool = False


class CdsHttpClient:
    """
    HTTP client for a Beckn Catalog Discovery Service that:
      - builds the protocol context and message for discover / catalog_publish,
      - serializes the body once and signs exactly those bytes,
      - sends unsigned only when allow_unsigned was chosen explicitly,
      - filters discover results down to the caller's role,
      - reports failures as CdsResult(success=False) carrying the request body.
    """

    def __init__(
        self,
        base_url: str,
        *,
        keystore: Optional[KeyStore] = None,
        client: Optional[httpx.Client] = None,
        api_key: Optional[str] = None,
        allow_unsigned: bool = False,
        filter_responses: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        bap_id: str = DEFAULT_BAP_ID,
        bap_uri: str = DEFAULT_BAP_URI,
        bpp_id: str = DEFAULT_BPP_ID,
        bpp_uri: str = DEFAULT_BPP_URI,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.keystore = keystore
        self.api_key = api_key
        self.allow_unsigned = allow_unsigned
        self.filter_responses = filter_responses
        self.bap_id = bap_id
        self.bap_uri = bap_uri
        self.bpp_id = bpp_id
        self.bpp_uri = bpp_uri
        self._owned_client = client is None
        if client is None:
            self.client = httpx.Client(base_url=self.base_url, timeout=timeout)
        else:
            self.client = client

    @classmethod
    def from_config(cls, config: CdsConfig, **kwargs) -> "CdsHttpClient":
        """Build a client from CdsConfig; explicit kwargs (keystore, client, ...) win."""
        params: Dict[str, Any] = {
            "api_key": config.api_key,
            "allow_unsigned": config.allow_unsigned,
            "timeout": config.timeout,
            "bap_id": config.bap_id,
            "bap_uri": config.bap_uri,
            "bpp_id": config.bpp_id,
            "bpp_uri": config.bpp_uri,
        }
        params.update(kwargs)
        return cls(config.base_url, **params)

    def close(self) -> None:
        if self._owned_client:
            self.client.close()

    def __enter__(self) -> "CdsHttpClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ---------- High-level API ----------------------------------------------

    def discover(self, query: DiscoverQuery, role: Optional[str] = None) -> CdsResult:
        context = build_context(ACTION_DISCOVER, role, bap_id=self.bap_id, bap_uri=self.bap_uri)
        message = build_discover_message(query.text_search, query.jsonpath, query.geo, role)
        request_body = {"context": context.to_dict(), "message": message}
        if query.is_empty():
            return CdsResult(
                success=False,
                request_body=request_body,
                error="at least one search criterion is required",
                error_code="empty_query",
            )

        result = self._post(DISCOVER_PATH, request_body)
        if result.success and self.filter_responses:
            result.data = filter_response(result.data, role)
        return result

    def publish(self, catalogs: List[Dict[str, Any]]) -> CdsResult:
        context = build_context(ACTION_CATALOG_PUBLISH, bpp_id=self.bpp_id, bpp_uri=self.bpp_uri)
        request_body = {"context": context.to_dict(), "message": {"catalogs": catalogs}}
        return self._post(PUBLISH_PATH, request_body)

    # ---------- Internals ----------------------------------------------------

    def _abs(self, route: str) -> str:
        if route.startswith("http://") or route.startswith("https://"):
            return route
        return urljoin(self.base_url, route.lstrip("/"))

    def _signature_headers(self, body: bytes) -> Dict[str, str]:
        """Digest + Authorization for body, or {} on the opted-in unsigned path.

        Raises NoKeyLoadedError when no key is current and unsigned sending
        was not allowed, SigningFailureError when signing itself fails.
        """
        if self.keystore is None:
            if not self.allow_unsigned:
                raise NoKeyLoadedError()
            _log.warning("No keystore configured; sending unsigned request")
            return {}
        try:
            return sign_request(self.keystore, body).as_headers()
        except NoKeyLoadedError:
            if not self.allow_unsigned:
                raise
            _log.warning("No signing key loaded; sending unsigned request")
            return {}

    def _post(self, route: str, request_body: Dict[str, Any]) -> CdsResult:
        url = self._abs(route)
        try:
            body = dumps_body(request_body)
        except orjson.JSONEncodeError as e:
            _log.error("Request to %s not sent: body not serializable: %s", route, e)
            return CdsResult(
                success=False, request_body=request_body, error=f"invalid request body: {e}", error_code="invalid_body"
            )
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers[API_KEY_HEADER] = self.api_key

        try:
            sig_headers = self._signature_headers(body)
        except (NoKeyLoadedError, SigningFailureError) as e:
            _log.error("Request to %s not sent: %s", route, e.message)
            return CdsResult(success=False, request_body=request_body, error=e.message, error_code=e.code)
        headers.update(sig_headers)
        signed = bool(sig_headers)

        try:
            r = self.client.post(url, content=body, headers=headers)
        except httpx.HTTPError as e:
            _log.error("CDS request to %s failed: %s", route, e)
            return CdsResult(
                success=False, request_body=request_body, error=str(e), error_code="transport_error", signed=signed
            )

        if r.is_error:
            error = f"CDS returned {r.status_code}: {r.reason_phrase}"
            _log.error("%s (%s)", error, route)
            return CdsResult(
                success=False,
                request_body=request_body,
                error=error,
                error_code="http_error",
                status_code=r.status_code,
                signed=signed,
            )

        data, err = try_parse_json(r.content)
        if err is not None:
            return CdsResult(
                success=False,
                request_body=request_body,
                error=f"invalid JSON response: {err}",
                error_code="invalid_response",
                status_code=r.status_code,
                signed=signed,
            )

        _log.info("CDS %s -> %s (signed=%s)", route, r.status_code, signed)
        return CdsResult(success=True, request_body=request_body, data=data, status_code=r.status_code, signed=signed)


__all__ = ["CdsResult", "CdsHttpClient"]
