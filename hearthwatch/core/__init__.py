"""Core log-reduction primitives (line patterns, session state, and events).

Kept free of FastAPI, Redis and file I/O so it can be reused by the API routes,
the file watcher, scripts, and tests.
"""
