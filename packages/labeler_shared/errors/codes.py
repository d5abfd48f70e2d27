"""Machine-readable error codes shared by labeler services.

Generic codes cover validation, lookup, and dependency failures. The
labeler-specific block below maps one-to-one onto the user-facing failure
taxonomy; the bot dispatcher translates each of them into a reply.
"""

# Validation
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
MALFORMED_INPUT = "MALFORMED_INPUT"

# Not found
NOT_FOUND = "NOT_FOUND"
PHASE_NOT_FOUND = "PHASE_NOT_FOUND"

# Conflict
CONFLICT = "CONFLICT"
IDENTIFIER_COLLISION = "IDENTIFIER_COLLISION"

# Policy
POLICY_VIOLATION = "POLICY_VIOLATION"
NOT_LINKED = "NOT_LINKED"
IDENTITY_MISMATCH = "IDENTITY_MISMATCH"
NO_CONTRIBUTION = "NO_CONTRIBUTION"
CAP_REACHED = "CAP_REACHED"

# Dependency / external system
DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"
DEPENDENCY_TIMEOUT = "DEPENDENCY_TIMEOUT"
DEPENDENCY_UNAVAILABLE = "DEPENDENCY_UNAVAILABLE"
LOOKUP_FAILURE = "LOOKUP_FAILURE"

# Internal
INTERNAL_ERROR = "INTERNAL_ERROR"
UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"
