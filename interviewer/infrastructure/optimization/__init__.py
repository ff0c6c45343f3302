"""Token Estimation.

Estimates token counts when a vendor omits usage reporting.
Bounded Context: Token Management
"""
