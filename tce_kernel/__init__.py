"""
TCE Kernel

Value objects, typed errors and structured logging shared by the
Total Cost of Employment engines:
- Money paired with an ISO 4217 currency, never built from a float
- Rounding derived from currency precision, applied at output boundaries
- Machine-readable exception codes
- JSON-lines logging with block-scoped context
"""

__version__ = "0.1.0"
