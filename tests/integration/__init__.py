"""
Integration tests against a real SQLAlchemy engine (aiosqlite in memory).

Covers the SQL repositories: UTC round-trips, conditional coupon increments,
row locking on overlap checks and optimistic ``lock_version`` writes.
"""
