# Middleware package init
"""
Toolhub Backend — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Submission Rate Limit] → [GZip] → [CORS] → Route

    1. Request ID first: every later log line and error body can carry it
    2. Logging: sees the final status, including 429s from the limiter
    3. Submission Rate Limit: only touches POST /api/requests
"""
