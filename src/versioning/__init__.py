"""
Package marker for cache-busting versions and invalidation under `src.versioning`.
It groups related modules under a stable import path and keeps package boundaries explicit.
Most functionality lives in the sibling modules; this file intentionally stays lightweight.
"""
