"""
FastAPI issue tracker backend package.

The application instance lives in ``issue_api.main``; the duplicate check and
the status workflow are plain functions in ``issue_api.similarity`` and
``issue_api.transitions``.
"""
