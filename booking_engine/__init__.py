"""Car rental booking lifecycle and pricing engine."""
