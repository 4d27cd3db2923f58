"""
Package marker for image delivery telemetry and alerting under `src.monitoring`.
It groups related modules under a stable import path and keeps package boundaries explicit.
Most functionality lives in the sibling modules; this file intentionally stays lightweight.
"""
