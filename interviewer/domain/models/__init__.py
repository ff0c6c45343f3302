"""Domain models: messages, requests, responses and configuration."""
