"""
ResourcePulse Backend - Middleware Package
==========================================

Cross-cutting concerns applied to every request.

Middleware chain (outermost first):
    Request -> [Rate Limit] -> [Request ID] -> [Access Log] -> [GZip]
            -> [CORS] -> [Audit] -> Route Handler

    1. Rate limit first: abusive clients are rejected before any work.
    2. Request ID next, so every later log line carries it.
    3. Audit is innermost: it sees the uncompressed JSON response and only
       records calls that actually succeeded.
"""
