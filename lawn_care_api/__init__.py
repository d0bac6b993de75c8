"""
Top‑level package for the LawnCare Pro API.

This file makes ``lawn_care_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``lawn_care_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
