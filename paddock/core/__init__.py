"""Core navigation primitives (results, events, session).

Kept free of FastAPI concerns so it can be reused by API routes, the terminal driver, and tests.
"""
