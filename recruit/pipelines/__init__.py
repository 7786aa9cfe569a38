"""Read-side pipelines for analytics, outreach profiles, search, ingestion and GDPR.

Pure shaping functions are kept separate from the async loaders so they can be
exercised without a database.
"""
