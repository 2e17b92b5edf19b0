"""
PurePlate Backend Configuration
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _load_api_keys() -> list[str]:
    """Collect Gemini keys from GEMINI_API_KEYS and GEMINI_API_KEY_1..9"""
    keys = [k.strip() for k in os.getenv("GEMINI_API_KEYS", "").split(",")]
    for i in range(1, 10):
        keys.append(os.getenv(f"GEMINI_API_KEY_{i}", "").strip())
    # Filter unset / duplicate keys, keep order
    return list(dict.fromkeys(k for k in keys if k))


# Gemini Configuration
GEMINI_API_KEYS = _load_api_keys()
GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-preview-09-2025")

# LLM Settings
GEMINI_TEMPERATURE = 0.2  # Keeps results consistent
GEMINI_TIMEOUT = int(os.getenv("GEMINI_TIMEOUT", "30"))
GEMINI_MAX_ATTEMPTS = int(os.getenv("GEMINI_MAX_ATTEMPTS", "1"))  # 1 = no retry

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS - Frontend URLs
CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    os.getenv("FRONTEND_URL", ""),  # Production frontend URL
]
# Filter empty strings
CORS_ORIGINS = [origin for origin in CORS_ORIGINS if origin]

# Allergies the user can declare
ALLERGY_OPTIONS = [
    "Gluten", "Peanuts", "Dairy", "Soy", "Shellfish", "Tree Nuts", "Eggs", "Corn"
]
