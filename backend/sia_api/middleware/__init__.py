"""
SIA API: Middleware Package
===========================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Logging] → [Rate Limit] → [GZip]
            → [Access Guard] → Route Handler

    - CORS outermost: preflights are answered before anything else, and
      every response (401s and 429s included) carries CORS headers
    - Request ID before logging, the rate limiter and the guard, so every
      error body (429s included) carries it
    - Rate limit before any real work; throttled requests are still logged
    - Access guard innermost: a rejected request is still logged with its
      status and request ID
"""
