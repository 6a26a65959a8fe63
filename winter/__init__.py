"""A small web framework: threaded HTTP server, router, shared components and reflective JSON mapping."""

__version__ = "0.1.0"