"""
Placement Pipeline
Backend for a campus placement portal: companies post job offers,
students apply, and companies run applicants through a multi-round
hiring pipeline to a final accept/reject outcome.

Architecture:
- PostgreSQL: job offers, recruitment stages, applications, directory tables
- Services: round queries and bulk round transitions (the pipeline core)
- FastAPI: thin transport layer over the services
"""

__version__ = "1.0.0"
