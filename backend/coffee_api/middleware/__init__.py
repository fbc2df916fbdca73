# Middleware package init
"""
Coffee API - Middleware Package
================================

Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → Route Handler

    Request ID runs first so the access log line and any error log lines
    carry the same ID.
"""
