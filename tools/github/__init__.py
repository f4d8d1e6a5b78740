"""GitHub integration modules.

Split into:
  - api.py   : all HTTP calls to the check-runs API
  - event.py : parsing of the workflow event payload
  - types.py : small shared data structures

pipeline/orchestrator.py acts as the orchestration layer.
"""
