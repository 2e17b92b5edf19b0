"""
PurePlate Core Module
Query analysis: cache, credential pool, prompt building, validation, orchestration
"""

from pureplate.models import (
    AnalysisResult,
    BMICategory,
    BMIReading,
    IngredientFinding,
    RiskLevel,
    UserContext,
    Verdict,
)
from pureplate.errors import (
    AnalysisError,
    EmptyQuery,
    EmptyResponse,
    MalformedResponse,
    NetworkFailure,
    PoolExhausted,
    QuotaExceeded,
    SchemaViolation,
)
from pureplate.cache import AnalysisHistory, MatchPolicy, ResultCache, SubstringMatch
from pureplate.credentials import CredentialPool
from pureplate.prompt import InstructionPayload, build_instruction
from pureplate.validator import validate
from pureplate.orchestrator import AnalysisOrchestrator, AnalysisState

__all__ = [
    "AnalysisResult",
    "BMICategory",
    "BMIReading",
    "IngredientFinding",
    "RiskLevel",
    "UserContext",
    "Verdict",
    "AnalysisError",
    "EmptyQuery",
    "EmptyResponse",
    "MalformedResponse",
    "NetworkFailure",
    "PoolExhausted",
    "QuotaExceeded",
    "SchemaViolation",
    "AnalysisHistory",
    "MatchPolicy",
    "ResultCache",
    "SubstringMatch",
    "CredentialPool",
    "InstructionPayload",
    "build_instruction",
    "validate",
    "AnalysisOrchestrator",
    "AnalysisState",
]
