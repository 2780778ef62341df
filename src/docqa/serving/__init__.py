"""
Serving — FastAPI application for the document question-answering service.

Exposes ``POST /api/uploadFile`` and ``POST /api/retrieve`` plus status
and liveness endpoints.
"""
