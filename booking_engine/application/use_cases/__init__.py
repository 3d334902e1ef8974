"""Use cases: one class per engine operation."""
