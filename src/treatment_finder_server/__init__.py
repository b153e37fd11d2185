"""treatment_finder_server — FastAPI REST API for the treatment finder SDK.

Hosts quiz sessions in process memory and exposes step-by-step interaction,
recommendations, session snapshots, lead hand-off, and read-only catalog
endpoints.
"""
