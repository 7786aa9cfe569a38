"""Backend package: DB models, analytics pipelines, APIs.

This package serves candidate analytics, outreach profiles, scored search,
rate-limited sign-in and GDPR self-service on top of the candidate database.
"""
