"""
API Documentation configuration.

OpenAPI tags and description for the gateway.
"""

TAGS_METADATA = [
    {
        "name": "health",
        "description": "Health check endpoints for monitoring service status.",
    },
    {
        "name": "ai",
        "description": "AI feature endpoints. Responses may be cached, generated or produced offline.",
    },
    {
        "name": "metrics",
        "description": "Usage counters per feature.",
    },
]


API_DESCRIPTION = """
# AI Request Gateway

Sits between feature endpoints and a metered, rate-limited AI provider.

## Request flow

1. **Cache check**: identical requests are answered from cache (`X-Cache: HIT`)
   and do not count against the rate limit.
2. **Rate check**: fixed one-minute windows per caller (`X-User-ID`).
3. **Upstream**: transient failures (429 / 503 / timeouts) are retried with
   exponential backoff.
4. **Fallback**: when the provider quota is exhausted, a deterministic offline
   result is returned with `fallback: true` (`X-Cache: FALLBACK`). It is never cached.

## Features

`ats-score`, `job-match`, `summary`, `bullets`, `keywords`
"""
