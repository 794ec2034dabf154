# Middleware package init
"""
Inkwell Backend: Middleware Package
=====================================

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    - Request ID runs first so every later log line can carry it
    - Access Log measures the full handling time including error handlers
    - CORS answers preflight requests and allows credentialed (cookie) calls
"""
