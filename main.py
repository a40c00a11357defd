"""Serve the mock skin-lesion inference API.

Run with `uvicorn main:app` from the repository root; the routes live in
api/main.py.
"""

from api.main import app  # re-export for uvicorn
