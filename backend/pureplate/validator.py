"""
Response Validator
Enforces the AnalysisResult schema on untrusted model output
"""

import json
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pureplate.errors import MalformedResponse, SchemaViolation
from pureplate.models import (
    AnalysisResult,
    Composition,
    IngredientFinding,
    Nutrition,
    RiskLevel,
    Verdict,
)

CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class _Schema(BaseModel):
    # Unknown fields are ignored so newer model output keeps validating.
    # NaN and Infinity are rejected: results must stay JSON-serializable.
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)


class CompositionPayload(_Schema):
    safe: float = Field(strict=True)
    questionable: float = Field(strict=True)
    harmful: float = Field(strict=True)


class NutritionPayload(_Schema):
    calories: float = Field(strict=True)
    protein: float = Field(strict=True)
    carbs: float = Field(strict=True)
    fats: float = Field(strict=True)
    sugar: float = Field(strict=True)


class IngredientPayload(_Schema):
    name: str = Field(min_length=1)
    risk: RiskLevel
    impact: Optional[str] = None
    tags: Optional[list[str]] = None
    alternative: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("ingredient name is blank")
        return value.strip()


class AnalysisPayload(_Schema):
    productName: str
    healthScore: int = Field(strict=True, ge=0, le=100)
    verdict: Verdict
    summary: Optional[str] = None
    composition: CompositionPayload
    nutrition: NutritionPayload
    ingredients: list[IngredientPayload]
    allergyAlerts: Optional[list[str]] = None

    @field_validator("productName")
    @classmethod
    def _product_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("productName is blank")
        return value.strip()

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(
            product_name=self.productName,
            health_score=self.healthScore,
            verdict=self.verdict,
            summary=self.summary or "",
            composition=Composition(
                safe=round(self.composition.safe),
                questionable=round(self.composition.questionable),
                harmful=round(self.composition.harmful)
            ),
            nutrition=Nutrition(**self.nutrition.model_dump()),
            ingredients=tuple(
                IngredientFinding(
                    name=ing.name,
                    risk=ing.risk,
                    impact=ing.impact or "",
                    tags=tuple(ing.tags or ()),
                    alternative=ing.alternative
                )
                for ing in self.ingredients
            ),
            allergy_alerts=tuple(dict.fromkeys(a for a in self.allergyAlerts or () if a))
        )


def _decode(raw: str) -> dict:
    text = raw.strip()
    fenced = CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedResponse(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponse(
            f"Response must be a JSON object, got {type(data).__name__}"
        )
    return data


def validate(raw: str) -> AnalysisResult:
    """Decode and check the model's text; the result has no id or timestamp yet"""
    if not isinstance(raw, str):
        raise MalformedResponse("Response text is missing")

    data = _decode(raw)

    try:
        payload = AnalysisPayload.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise SchemaViolation(f"Response does not match schema: {problems}") from e

    return payload.to_result()
