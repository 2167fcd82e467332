"""Custom exception hierarchy for the help-desk knowledge base."""


class HelpdeskError(Exception):
    """Base exception for all helpdesk_kb errors."""


class ModelUnavailable(HelpdeskError):
    """Transport or network failure calling the language model."""


class EmbeddingUnavailable(HelpdeskError):
    """Embedding provider failed or returned no vector."""


class CitationResolutionFailed(HelpdeskError):
    """A single cited message could not be resolved (permalink or author)."""


class ParseThreadFailed(HelpdeskError):
    """Thread parser model call failed or returned an invalid schema."""


class ConfigurationError(HelpdeskError):
    """Error in system configuration."""
