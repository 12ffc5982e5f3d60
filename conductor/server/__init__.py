"""
Conductor Server Package.

This package contains the web server implementation for the Conductor platform.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration, constants and request dependencies.
    services: Business logic and outbound API clients.
    middleware: Request timing and monitoring.
    exception_handlers: Error envelope rendering.
"""
