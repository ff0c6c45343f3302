"""Core Application Layer: Orchestrates interview use cases.

Connects the domain layer with the provider adapters through interfaces.
Contains the enhanced client and the interview orchestration service.
"""
