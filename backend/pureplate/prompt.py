"""
Context Builder
Turns a query plus the user's allergies and BMI into the Gemini instruction payload
"""

from dataclasses import dataclass

from pureplate.models import UserContext


@dataclass(frozen=True)
class InstructionPayload:
    """What gets sent to the model: system instruction + user turn"""
    system_instruction: str
    user_text: str


# =============================================================================
# SYSTEM PROMPT - the schema here is re-checked by the validator
# =============================================================================

SYSTEM_PROMPT = """You are PurePlate AI, an advanced food toxicity and nutritional analyzer.
Analyze: "{query}".

Context:
- Allergies: {allergies}.
- BMI: {bmi_value} ({bmi_category}).

Return exactly this JSON structure:
{{
  "productName": "Name",
  "healthScore": 0-100,
  "verdict": "Safe" | "Caution" | "Avoid",
  "summary": "1-sentence personalized summary based on user BMI and allergies.",
  "composition": {{ "safe": 0, "questionable": 0, "harmful": 0 }},
  "nutrition": {{ "calories": 0, "protein": 0, "carbs": 0, "fats": 0, "sugar": 0 }},
  "ingredients": [{{
    "name": "s",
    "risk": "Low" | "Medium" | "High",
    "impact": "Brief scientific impact",
    "tags": ["Vegan", "Preservative", etc],
    "alternative": "Healthier swap" | null
  }}],
  "allergyAlerts": []
}}

Rules:
- healthScore is an integer between 0 and 100.
- composition values are integer percentages.
- nutrition values are numbers per serving (calories in kcal, the rest in grams).
- allergyAlerts lists only allergens from the user's allergy list that the product contains.
- Be strict about chemicals like Red 40, Aspartame, High Fructose Corn Syrup.
- If it's a single chemical search, still provide the composition percentages for that chemical's general health profile."""


def build_instruction(query: str, context: UserContext) -> InstructionPayload:
    """Build the instruction payload; missing context degrades to placeholders"""
    allergies = ", ".join(sorted(context.allergies)) or "None"

    if context.bmi:
        bmi_value = f"{context.bmi.value:.1f}"
        bmi_category = context.bmi.category.value
    else:
        bmi_value = "Unknown"
        bmi_category = "N/A"

    system_instruction = SYSTEM_PROMPT.format(
        query=query,
        allergies=allergies,
        bmi_value=bmi_value,
        bmi_category=bmi_category
    )

    return InstructionPayload(
        system_instruction=system_instruction,
        user_text=f"Analyze the food item: {query}"
    )
