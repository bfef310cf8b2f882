"""
Top-level package for the GreenHub browser.

This package exposes the core architecture (domain, services, views, UI adapters).
Most code should import from submodules such as:
    greenhub.core
    greenhub.services
    greenhub.ui
"""

__all__: list[str] = []
