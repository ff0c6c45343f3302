"""Domain Event definitions.

Describes significant occurrences around provider calls (attempts, retries,
failures, cache hits) so they can be logged or observed.
"""
