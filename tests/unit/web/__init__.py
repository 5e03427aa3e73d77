"""Unit tests for Hi Tek web route modules.

One test file per route module, using FastAPI's TestClient with the
spreadsheet proxy replaced by the in-memory fake from tests/conftest.py.
"""
