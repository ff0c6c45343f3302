"""Domain Layer: value objects, interfaces and errors shared by every layer.

Has no dependencies on infrastructure or core code.
"""
