"""Domain Interfaces (Ports):

Defines the contracts (Abstract Base Classes) that provider adapters and
caches must implement. Core logic depends on these, not on concrete classes.
"""
