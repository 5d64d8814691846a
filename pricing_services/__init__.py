"""
pricing_services -- Imperative shell over the pricing engines.

Services hold injected collaborators (session, clock, configuration
directory), select configuration, call the pure engines and return
explicit ``ServiceOutcome`` results.  They never commit.
"""

from pricing_services.commission_service import CommissionService
from pricing_services.outcomes import ServiceOutcome, ServiceStatus
from pricing_services.pricing_service import PricingService, QuoteClosing
from pricing_services.quote_service import (
    NegotiationReview,
    QuoteMutation,
    QuoteNegotiationService,
    QuoteUpdate,
)

__all__ = [
    "CommissionService",
    "PricingService",
    "QuoteClosing",
    "QuoteNegotiationService",
    "QuoteMutation",
    "QuoteUpdate",
    "NegotiationReview",
    "ServiceOutcome",
    "ServiceStatus",
]
