"""Drone conversion extension that wraps cache-enabled steps.

Key Responsibilities:
    - Rewrite pipeline configurations so steps declaring ``caches`` are
      surrounded by cache restore and rebuild steps
    - Serve the rewrite behind a signed HTTP endpoint for the CI server

Collaborators:
    - Upstream: The CI server's conversion extension client
    - Downstream: The cache plugin image referenced by generated steps

Example:
    >>> from drone_cache_convert.conversion import DocumentRewriter
    >>> DocumentRewriter(image="meltwater/drone-cache").rewrite("kind: secret\\n")
    '---\\nkind: secret\\n'
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
