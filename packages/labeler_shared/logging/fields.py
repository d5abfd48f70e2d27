"""Canonical structured logging field names.

Keeping names in one place prevents drift between services when the same
concept (subject, trace, component) shows up in many log lines.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"
EXCEPTION = "exception"

# Envelope/correlation fields.
TRACE_ID = "trace_id"
ENVELOPE_ID = "envelope_id"
PRINCIPAL = "principal"

# Public API invocation fields.
COMPONENT_ID = "component_id"
API_NAME = "api_name"
PUBLIC_API_INVOCATION_EVENT = "public_api_invocation"
PUBLIC_API_COMPLETION_EVENT = "public_api_completion"
PUBLIC_API_INSTRUMENTATION_FAILURE_EVENT = "public_api_instrumentation_failure"
SUCCESS = "success"
DURATION_MS = "duration_ms"
ERRORS = "errors"
STAGE = "stage"
CONCERN = "concern"

# Labeler domain fields.
SUBJECT = "subject"
COMMAND = "command"
LABEL_IDENTIFIER = "label_identifier"
CONVERSATION_ID = "conversation_id"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
