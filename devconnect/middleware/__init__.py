"""
DevConnect Backend - Middleware Package
========================================

Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

    - Rate limit rejects floods before any database work
    - Request ID is set before the access log so every line carries it
    - The access log records the final status and duration
"""
