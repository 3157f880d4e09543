"""Outbound HTTP for the payment and notification providers.

Stripe checkout calls and notification emails share one pooled
``httpx.AsyncClient``. Callers pass a tighter ``timeout=`` per request where
the provider warrants it; redirects are never followed.
"""

import httpx

http = httpx.AsyncClient(
    timeout=httpx.Timeout(30, connect=10),
    limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
    follow_redirects=False,
)


async def close_clients():
    """Close the pooled client on app shutdown."""
    try:
        await http.aclose()
    except RuntimeError:
        # event loop already gone (test teardown)
        pass
