"""API Resilience Implementations.

Contains the retry service with exponential backoff used around provider calls.
Bounded Context: API Resilience
"""
