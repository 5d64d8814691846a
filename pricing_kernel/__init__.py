"""
Pricing Kernel

The foundation of the quote pricing and commercial closing engine:
- Decimal-only Money with ISO 4217 currencies
- Quote, line item, discount and attribution domain types
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Read-only access to promises and their quotes
"""

__version__ = "0.1.0"
