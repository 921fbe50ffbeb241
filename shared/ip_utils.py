"""
Client IP resolution for the verifier's ``remoteip`` hint.

The hint is best-effort: the verifier accepts calls without it, so an
unresolvable address is reported as ``None`` rather than an error.
"""

from __future__ import annotations

from typing import Optional

from starlette.requests import HTTPConnection

# Checked in order before falling back to the socket peer
PROXY_IP_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",  # Cloudflare
    "True-Client-IP",  # Akamai and others
    "X-Forwarded-For",  # first entry is the original client
    "X-Real-IP",  # nginx
    "X-Client-IP",
)


def get_client_ip(request: HTTPConnection) -> Optional[str]:
    """Return the caller's IP address, or ``None`` if it cannot be determined."""
    for header in PROXY_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            client_ip = value.split(",")[0].strip()
            if client_ip:
                return client_ip

    if request.client and request.client.host:
        return request.client.host
    return None
