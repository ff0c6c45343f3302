"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the application to LLM vendor HTTP APIs, configuration sources and
the console by implementing the interfaces defined in the domain layer.
"""
