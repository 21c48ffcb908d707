"""
Edge router: subdomain -> generated region page on the origin.

Every request is forwarded once. The origin's status, headers and raw body
bytes go back to the client unchanged; only the request path is rewritten.
No retries. Timeout -> 504, any other transport failure -> 502.

Run locally:
  EDGE_ORIGIN_URL=http://127.0.0.1:8080 python -m regiondir serve-edge --port 8000
"""

from __future__ import annotations

import http.cookiejar
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import requests
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from urllib3.exceptions import HTTPError as Urllib3HTTPError
from urllib3.exceptions import ReadTimeoutError

from ..config import EdgeConfig
from ..errors import RouteUpstreamError
from .routing import decide_route

logger = logging.getLogger(__name__)

HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

# RFC 7230 hop-by-hop headers, plus the ones the transport recomputes.
_HOP_BY_HOP = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "trailers",
    "transfer-encoding",
    "upgrade",
}
_REQUEST_DROP = _HOP_BY_HOP | {"host", "content-length"}
_RESPONSE_DROP = _HOP_BY_HOP | {"content-length"}
# HEAD has no body, so the origin's length is the only correct value.
_HEAD_RESPONSE_DROP = _HOP_BY_HOP


class _RejectAllCookies(http.cookiejar.DefaultCookiePolicy):
    """Cookie policy that neither stores nor sends cookies."""

    def set_ok(self, cookie, request):
        return False

    def return_ok(self, cookie, request):
        return False


def origin_session() -> requests.Session:
    """
    Pooled session for origin calls. The cookie jar never keeps anything, so an
    origin Set-Cookie for one client is never replayed on another client's request;
    the client's own Cookie header is forwarded as a plain header. Proxy and
    .netrc settings from the host environment are ignored for the same reason.
    """
    session = requests.Session()
    session.cookies.set_policy(_RejectAllCookies())
    session.trust_env = False
    return session


@dataclass
class UpstreamResponse:
    status: int
    headers: List[Tuple[str, str]]
    body: bytes


def forward_headers(headers, original_host: str, scheme: str) -> Dict[str, str]:
    out = {k: v for k, v in headers.items() if k.lower() not in _REQUEST_DROP}
    if original_host:
        out["X-Forwarded-Host"] = original_host
    out["X-Forwarded-Proto"] = scheme
    return out


def fetch_upstream(
    session: requests.Session,
    method: str,
    url: str,
    headers: Dict[str, str],
    body: bytes,
    timeout: float,
) -> UpstreamResponse:
    """
    One request to the origin, returning the undecoded body.

    Raises RouteUpstreamError on any transport failure; HTTP error statuses are
    normal responses here.
    """
    try:
        resp = session.request(
            method,
            url,
            headers=headers,
            data=body or None,
            timeout=timeout,
            allow_redirects=False,
            stream=True,
        )
    except requests.Timeout as e:
        raise RouteUpstreamError(f"Origin timed out after {timeout}s: {url}", timed_out=True) from e
    except requests.RequestException as e:
        raise RouteUpstreamError(f"Origin request failed: {url}: {e}") from e

    try:
        # decode_content=False keeps gzip/br bodies byte-identical to what the origin sent
        content = resp.raw.read(decode_content=False)
    except ReadTimeoutError as e:
        raise RouteUpstreamError(f"Origin body read timed out: {url}", timed_out=True) from e
    except (Urllib3HTTPError, OSError) as e:
        raise RouteUpstreamError(f"Origin body read failed: {url}: {e}") from e
    finally:
        resp.close()

    drop = _HEAD_RESPONSE_DROP if method.upper() == "HEAD" else _RESPONSE_DROP
    headers_out = [(k, v) for k, v in resp.raw.headers.items() if k.lower() not in drop]
    return UpstreamResponse(status=resp.status_code, headers=headers_out, body=content)


def to_client_response(upstream: UpstreamResponse) -> Response:
    response = Response(content=upstream.body, status_code=upstream.status)
    if any(k.lower() == "content-length" for k, _ in upstream.headers):
        response.raw_headers[:] = [(k, v) for k, v in response.raw_headers if k != b"content-length"]
    # raw_headers keeps repeated headers (Set-Cookie) as separate lines
    response.raw_headers.extend((k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in upstream.headers)
    return response


def create_app(config: EdgeConfig, session: Optional[requests.Session] = None) -> FastAPI:
    app = FastAPI(title="Region Directory Edge", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config
    app.state.session = session if session is not None else origin_session()

    @app.exception_handler(RouteUpstreamError)
    async def upstream_error_handler(request: Request, exc: RouteUpstreamError):
        status_code = 504 if exc.timed_out else 502
        logger.error("Upstream failure (%s) for %s %s: %s", status_code, request.method, request.url, exc)
        return PlainTextResponse("Gateway Timeout" if exc.timed_out else "Bad Gateway", status_code=status_code)

    @app.api_route("/{full_path:path}", methods=HTTP_METHODS)
    async def forward(request: Request, full_path: str):
        cfg: EdgeConfig = request.app.state.config
        host = request.headers.get("host", "")
        raw_path = request.scope.get("raw_path") or request.url.path.encode("latin-1")
        path = raw_path.split(b"?", 1)[0].decode("latin-1") or "/"

        decision = decide_route(
            host,
            path,
            request.url.query,
            reserved=cfg.reserved_labels,
            base_domain=cfg.base_domain,
        )
        logger.debug("%s %s%s -> %s %s", request.method, host, path, decision.action, decision.upstream_path)

        body = await request.body()
        upstream = await run_in_threadpool(
            fetch_upstream,
            request.app.state.session,
            request.method,
            cfg.origin_url + decision.upstream_path,
            forward_headers(request.headers, host, request.url.scheme),
            body,
            cfg.upstream_timeout_s,
        )
        return to_client_response(upstream)

    return app
