# edgeauth/__init__.py

"""
Edge Auth: issues and validates HS256 JSON Web Tokens for a web-edge process.

Submodules are imported explicitly where needed; importing `edgeauth.main`
builds the FastAPI application and reads settings from the environment, so
nothing is imported eagerly here.
"""
