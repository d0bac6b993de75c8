"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  Each domain (accounts, grass species, plans) exposes a
router defined in ``api/v1/endpoints`` and keeps its business logic in
``services``.  Persistence helpers live in ``repositories`` and the
shared plumbing (configuration, database, security, errors) in
``core``.
"""

from .main import app  # noqa: F401
