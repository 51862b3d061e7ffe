"""
FastAPI backend server for SlideFetch.

Provides REST endpoints for:
- Reading slideshow metadata and preview URLs
- Generating PDF, PPTX, or ZIP files from selected slides
- Serving generated files for a limited time
"""

__version__ = "0.1.0"
