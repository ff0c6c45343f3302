"""AI Provider Implementations.

Contains adapters for different LLM vendors (OpenAI-style, Gemini-style, Mock),
each implementing the `AIProvider` interface from the domain layer, plus the
shared HTTP helper, prompt builders and response parsers.
"""
