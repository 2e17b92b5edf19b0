"""
Analysis Data Model
Defines the AnalysisResult dataclass, its parts, and the caller's UserContext
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from config import ALLERGY_OPTIONS


class Verdict(str, Enum):
    SAFE = "Safe"
    CAUTION = "Caution"
    AVOID = "Avoid"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class BMICategory(str, Enum):
    UNDERWEIGHT = "Underweight"
    NORMAL = "Normal"
    OVERWEIGHT = "Overweight"
    OBESE = "Obese"

    @classmethod
    def parse(cls, label: str) -> "BMICategory":
        """Accepts enum values case-insensitively, plus the legacy 'Normal weight'"""
        cleaned = label.strip().lower()
        if cleaned == "normal weight":
            return cls.NORMAL
        for member in cls:
            if member.value.lower() == cleaned:
                return member
        raise ValueError(f"Unknown BMI category: {label!r}")


@dataclass(frozen=True)
class Composition:
    """Share of safe / questionable / harmful ingredients, in percent"""
    safe: int = 0
    questionable: int = 0
    harmful: int = 0

    def to_dict(self) -> dict:
        return {
            "safe": self.safe,
            "questionable": self.questionable,
            "harmful": self.harmful
        }


@dataclass(frozen=True)
class Nutrition:
    """Nutritional estimate for a single serving"""
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0
    sugar: float = 0

    def to_dict(self) -> dict:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
            "sugar": self.sugar
        }


@dataclass(frozen=True)
class IngredientFinding:
    """One ingredient and the risk it carries"""
    name: str
    risk: RiskLevel
    impact: str = ""
    tags: tuple[str, ...] = ()
    alternative: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "risk": self.risk.value,
            "impact": self.impact,
            "tags": list(self.tags),
            "alternative": self.alternative
        }


DEGRADED_PRODUCT_NAME = "Connection Error"
DEGRADED_SUMMARY = (
    "The AI is currently resting. Try searching for a previously scanned item!"
)


@dataclass(frozen=True)
class AnalysisResult:
    """
    A complete safety / nutrition assessment for one product.

    Results produced by a successful analysis carry an ``id`` and
    ``timestamp``. Degraded placeholders carry an ``error`` marker instead
    and never enter history.
    """
    product_name: str
    health_score: int
    verdict: Verdict
    summary: str
    composition: Composition
    nutrition: Nutrition
    ingredients: tuple[IngredientFinding, ...] = ()
    allergy_alerts: tuple[str, ...] = ()
    id: Optional[int] = None
    timestamp: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        return self.error is not None

    @classmethod
    def degraded(cls, reason: str) -> "AnalysisResult":
        """Placeholder returned when an analysis could not be completed"""
        return cls(
            product_name=DEGRADED_PRODUCT_NAME,
            health_score=0,
            verdict=Verdict.CAUTION,
            summary=DEGRADED_SUMMARY,
            composition=Composition(),
            nutrition=Nutrition(),
            timestamp=datetime.now(),
            error=reason
        )

    def stamped(self, result_id: int, timestamp: datetime) -> "AnalysisResult":
        return replace(self, id=result_id, timestamp=timestamp)

    def with_allergy_alerts(self, alerts: tuple[str, ...]) -> "AnalysisResult":
        return replace(self, allergy_alerts=alerts)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "productName": self.product_name,
            "healthScore": self.health_score,
            "verdict": self.verdict.value,
            "summary": self.summary,
            "composition": self.composition.to_dict(),
            "nutrition": self.nutrition.to_dict(),
            "ingredients": [ing.to_dict() for ing in self.ingredients],
            "allergyAlerts": list(self.allergy_alerts)
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class BMIReading:
    value: float
    category: BMICategory

    def to_dict(self) -> dict:
        return {"value": self.value, "category": self.category.value}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["BMIReading"]:
        if not data or data.get("value") is None:
            return None
        return cls(
            value=float(data["value"]),
            category=BMICategory.parse(str(data.get("category", "")))
        )


def canonical_allergy(name: str) -> str:
    """Map a user-supplied allergy name onto the fixed option list"""
    cleaned = name.strip().lower()
    for option in ALLERGY_OPTIONS:
        if option.lower() == cleaned:
            return option
    raise ValueError(f"Unknown allergy: {name!r}")


@dataclass(frozen=True)
class UserContext:
    """Personal context supplied by the caller alongside a query"""
    allergies: frozenset[str] = field(default_factory=frozenset)
    bmi: Optional[BMIReading] = None

    def to_dict(self) -> dict:
        return {
            "allergies": sorted(self.allergies),
            "bmi": self.bmi.to_dict() if self.bmi else None
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "UserContext":
        if not data:
            return cls()
        return cls(
            allergies=frozenset(
                canonical_allergy(a) for a in data.get("allergies") or []
            ),
            bmi=BMIReading.from_dict(data.get("bmi"))
        )
