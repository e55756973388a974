# Middleware package init
"""
RecipePlanner Backend - Middleware Package
===========================================

What:  Cross-cutting concerns applied to requests.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: Generate correlation ID for logging and tracing
    2. Logging: Log request details with the generated request ID
    3. CORS: Applied by FastAPI's CORSMiddleware (handles preflight)

The access guard (auth_guard.py) lives here too, but it is a FastAPI
dependency rather than a middleware: only the routes that declare it are
protected, so register/login/search/health stay public.
"""
