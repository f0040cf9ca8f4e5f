# Middleware package init
"""
SnipShelf Backend — Middleware Package
========================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Authentication] → [Logging] → [GZip/CORS] → Route

    1. Request ID first: every later log line and error body carries it
    2. Authentication: resolves request.state.user for require_user and
       publishes the user id for the access log
    3. Logging: one line per request with status, duration, request/user ids
"""
