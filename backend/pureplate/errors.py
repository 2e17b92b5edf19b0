"""
Analysis Errors
Everything below AnalysisError is turned into a degraded result by the orchestrator
"""


class EmptyQuery(ValueError):
    """Raised when the query is empty or whitespace-only"""
    pass


class AnalysisError(Exception):
    """Base exception for failures while analyzing a query"""
    pass


class PoolExhausted(AnalysisError):
    """Raised when no API credentials are configured"""
    pass


class NetworkFailure(AnalysisError):
    """Raised for transport-level and non-success HTTP errors"""
    pass


class QuotaExceeded(NetworkFailure):
    """Raised when the service reports the key's quota is used up"""
    pass


class EmptyResponse(AnalysisError):
    """Raised when the service reply carries no usable text"""
    pass


class SchemaViolation(AnalysisError):
    """Raised when the service text does not decode into a valid AnalysisResult"""
    pass


class MalformedResponse(SchemaViolation):
    """Raised when the service text is not a JSON object at all"""
    pass
