# ============================================================================
# EXCEPTIONS
# ============================================================================
# STATUS: Shared - used by services, infrastructure and triggers
# PURPOSE: Exception hierarchy separating contract violations, expected
#          business failures and fatal configuration errors
# EXPORTS: ContractViolationError, LockOrderViolationError, BusinessLogicError,
#          ClientError, PackageValidationError, PackageValidationCancelled,
#          TransientFault, FeedFormatError, ConfigurationError,
#          FeedHandlerNotRegisteredError
# DEPENDENCIES: None (standard library only)
# ============================================================================

"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues, mapped to 4xx or degraded)
3. Configuration Errors (fatal deployment problems)

The trigger layer maps these onto HTTP status codes:
    ClientError           -> 400
    BusinessLogicError    -> handled inside the service that raised it
    ConfigurationError    -> 500 (never recovered)
    ContractViolationError-> 500 (bug - fix the code)
"""


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.

    Examples:
        - Reconciler handed something that is not a CanonicalName
        - Feed lock acquired out of the fixed global order
    """
    pass


class LockOrderViolationError(ContractViolationError):
    """
    A thread tried to take a feed lock whose rank is not strictly greater
    than every feed lock it already holds.

    Raised before blocking, so an ordering bug surfaces as an exception
    instead of a deadlock.
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime business logic failures.

    These are normal failures that occur during system operation
    and should be handled gracefully without crashing.
    """
    pass


class ClientError(BusinessLogicError):
    """
    Request mistake attributable to the caller (HTTP 400).

    Examples:
        - Unknown ?command= value
        - Missing 'location' on a fetch-and-add request
    """
    pass


class PackageValidationError(BusinessLogicError):
    """
    The package validator faulted while inspecting an uploaded file.
    """
    pass


class PackageValidationCancelled(BusinessLogicError):
    """
    The package validator reported the query as cancelled.

    Treated exactly like a fault: temp file removed, client error, no retry.
    """
    pass


class TransientFault(BusinessLogicError):
    """
    Network or storage failure that is degraded rather than surfaced.

    Examples:
        - Blob store unreachable while loading a feed
        - Remote package download failed mid-stream
    """
    pass


class FeedFormatError(BusinessLogicError):
    """
    A feed document could not be parsed.

    Examples:
        - Truncated XML in the working copy
        - Root element is not an Atom feed
        - Package extension element missing required attributes
    """
    pass


class ConfigurationError(Exception):
    """
    System configuration error.

    These are typically fatal and indicate misconfiguration
    that prevents the system from operating.

    Examples:
        - Missing FEED_PREFIX_URL / PACKAGE_PREFIX_URL
        - PACKAGE_VALIDATOR not importable
        - FEED_NAMES missing the current/archive roles
    """
    pass


class FeedHandlerNotRegisteredError(ConfigurationError):
    """
    Lookup of a feed name that has no registered handler.

    Indicates a missing deployment-time contract (e.g. the 'current' feed
    trying to migrate into an 'archive' feed that was never configured).
    """

    def __init__(self, feed_name: str, available=None):
        self.feed_name = feed_name
        self.available = list(available or [])
        super().__init__(
            f"No feed handler registered for '{feed_name}'. "
            f"Registered feeds: {self.available}"
        )
