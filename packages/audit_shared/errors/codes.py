"""Machine-readable error codes shared by audit trail components.

Component-local codes (for example the audit trail's own failure codes) live
beside the component and reuse the categories defined in ``types``.
"""

# Bad input reaching a shared helper.
INVALID_ARGUMENT = "INVALID_ARGUMENT"

# The row or record a read expected is absent.
RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

# A write collided with an existing row or constraint.
ALREADY_EXISTS = "ALREADY_EXISTS"

# The backing store failed, timed out, or could not be reached.
DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"
DEPENDENCY_TIMEOUT = "DEPENDENCY_TIMEOUT"
DEPENDENCY_UNAVAILABLE = "DEPENDENCY_UNAVAILABLE"

# Anything else.
UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"
