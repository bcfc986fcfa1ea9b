"""
Task tracker record store package.

The FastAPI application lives in src.api.main; storage backends in
src.api.repositories and src.api.db.
"""
