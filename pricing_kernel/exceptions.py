"""
Typed Exception Hierarchy for the Pricing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Pricing errors are surfaced to sales screens, payout jobs and APIs.  Callers
must be able to tell an undefined pricing policy from a missing promise
without parsing message strings, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        calculator.compose(...)
    except InvalidPolicyError as e:
        api_response(code=e.code, field=e.field, value=str(e.value))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from PricingKernelError:

    PricingKernelError (base)
    |
    +-- PolicyError
    |   +-- InvalidPolicyError
    |
    +-- LookupFailedError
    |   +-- NotFoundError
    |       +-- ConfigNotFoundError   (also a ConfigurationError)
    |
    +-- QuoteError
    |   +-- QuoteFrozenError
    |
    +-- ConfigurationError
        +-- ConfigNotFoundError
        +-- InvalidConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                  | When Raised
----------------|-----------------------|-----------------------------------------
Policy          | INVALID_POLICY        | commission_percent >= 100, percent out
                |                       | of range, negative cost basis
----------------|-----------------------|-----------------------------------------
Lookup          | NOT_FOUND             | Promise missing, promise without quotes
----------------|-----------------------|-----------------------------------------
Quote           | QUOTE_FROZEN          | Mutation requested on a signed quote
----------------|-----------------------|-----------------------------------------
Configuration   | CONFIG_NOT_FOUND      | No published pricing configuration
                |                       | covers the studio and date
                | CONFIGURATION_ERROR   | A set is unreadable or fails validation
===============================================================================
"""


class PricingKernelError(Exception):
    """
    Base exception for all pricing kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PRICING_KERNEL_ERROR"


# Policy-related exceptions


class PolicyError(PricingKernelError):
    """Base exception for pricing policy errors."""

    code: str = "POLICY_ERROR"


class InvalidPolicyError(PolicyError):
    """
    A pricing policy value makes the price formula undefined.

    The canonical case is ``commission_percent >= 100``: the commission
    absorbing base price ``subtotal / (1 - commission%)`` has no value.
    This is fatal to the call and can never be silently defaulted.
    """

    code: str = "INVALID_POLICY"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid pricing policy: {field}={value} ({reason})")


# Lookup-related exceptions


class LookupFailedError(PricingKernelError):
    """Base exception for failed lookups at the data-fetch boundary."""

    code: str = "LOOKUP_FAILED"


class NotFoundError(LookupFailedError):
    """A required record does not exist."""

    code: str = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str, reason: str = ""):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        message = f"{entity_type} not found: {entity_id}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


# Quote-related exceptions


class QuoteError(PricingKernelError):
    """Base exception for quote lifecycle errors."""

    code: str = "QUOTE_ERROR"


class QuoteFrozenError(QuoteError):
    """
    Attempted to mutate a quote that was frozen by a signed contract.

    Once a contract is signed the quote is a snapshot; prices, discounts
    and courtesy flags can no longer change.
    """

    code: str = "QUOTE_FROZEN"

    def __init__(self, quote_id: str, operation: str):
        self.quote_id = quote_id
        self.operation = operation
        super().__init__(
            f"Quote {quote_id} is frozen; cannot apply '{operation}'"
        )


# Configuration-related exceptions


class ConfigurationError(PricingKernelError):
    """Base exception for studio pricing configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class ConfigNotFoundError(ConfigurationError, NotFoundError):
    """No published pricing configuration covers the studio and date."""

    code: str = "CONFIG_NOT_FOUND"

    def __init__(self, studio: str, as_of_date: str):
        self.studio = studio
        self.as_of_date = as_of_date
        NotFoundError.__init__(
            self,
            entity_type="StudioPricingConfig",
            entity_id=studio,
            reason=f"no published configuration as of {as_of_date}",
        )


class InvalidConfigError(ConfigurationError):
    """A pricing configuration set cannot be read or fails validation."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, source: str, errors: list[str]):
        self.source = source
        self.errors = list(errors)
        super().__init__(
            f"Invalid pricing configuration {source}:\n"
            + "\n".join(f"  - {e}" for e in self.errors)
        )
