from __future__ import annotations

import json
import os
import ssl
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Optional

from taskflow.core.errors import MalformedProviderResponse, TransportError


def post_json(
    url: str,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    timeout: float,
    ca_bundle: Optional[str] = None,
) -> Dict[str, Any]:
    body = json.dumps(payload).encode("utf-8")
    request = urllib.request.Request(url, data=body, method="POST")
    request.add_header("Content-Type", "application/json")
    for key, value in headers.items():
        request.add_header(key, value)
    ca_bundle = ca_bundle or os.environ.get("SSL_CERT_FILE")
    context = None
    if ca_bundle and os.path.exists(ca_bundle):
        context = ssl.create_default_context(cafile=ca_bundle)
    # one attempt only; the timeout is the sole bound on the call
    try:
        with urllib.request.urlopen(request, context=context, timeout=timeout) as response:
            raw = response.read().decode("utf-8")
    except urllib.error.HTTPError as exc:
        detail = exc.read().decode("utf-8", "replace") if exc.fp else ""
        raise TransportError(f"HTTP {exc.code}: {detail}".strip()) from exc
    except (urllib.error.URLError, OSError) as exc:
        raise TransportError(f"Request to {_host(url)} failed: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedProviderResponse(f"Response from {_host(url)} is not JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedProviderResponse(f"Response from {_host(url)} is not a JSON object")
    return data


def _host(url: str) -> str:
    return urllib.parse.urlsplit(url).netloc or url
