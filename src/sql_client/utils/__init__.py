"""Shared utilities — logging setup and cross-cutting helpers.

Rules
-----
* No business logic.
* Importable by any layer.
"""
