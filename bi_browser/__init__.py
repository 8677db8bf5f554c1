"""
Top-level package for the associative BI dashboard browser.

This package exposes the core architecture (selection engine, views, services).
Most code should import from submodules such as:
    bi_browser.core
    bi_browser.views
    bi_browser.services
"""

__all__: list[str] = []
