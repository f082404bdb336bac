"""
Solace Configuration
Generation backend, retry policy, session store and safety parameters
"""
import os

# API Configuration
GROQ_API_KEY = os.environ.get("GROQ_API_KEY", "")
GROQ_MODEL = os.environ.get("GROQ_MODEL", "llama-3.1-8b-instant")
GROQ_MODEL_FALLBACK = os.environ.get("GROQ_MODEL_FALLBACK", "gemma2-9b-it")

# Generation Parameters
GENERATION_MAX_TOKENS = int(os.environ.get("GENERATION_MAX_TOKENS", "300"))
GENERATION_TEMPERATURE = float(os.environ.get("GENERATION_TEMPERATURE", "0.7"))
GENERATION_TOP_P = 0.9
REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", "30"))  # Seconds per upstream call

# Retry Policy
RETRY_MAX_ATTEMPTS = int(os.environ.get("RETRY_MAX_ATTEMPTS", "4"))  # First call plus 3 retries
RETRY_BASE_DELAY = float(os.environ.get("RETRY_BASE_DELAY", "1.0"))  # Seconds
RETRY_MAX_DELAY = float(os.environ.get("RETRY_MAX_DELAY", "8.0"))  # Cap for any single wait
RETRY_TOTAL_TIMEOUT = float(os.environ.get("RETRY_TOTAL_TIMEOUT", "20.0"))  # Budget for all waits

# Prompt Construction
MAX_PROMPT_CHARS = 600  # User message chars sent upstream
MAX_HISTORY_TURN_CHARS = 300  # Per-turn chars of history sent upstream

# Session Configuration
SESSION_WINDOW = int(os.environ.get("SESSION_WINDOW", "10"))  # Turns kept per session (5 exchanges)
SESSION_TTL_SECONDS = int(os.environ.get("SESSION_TIMEOUT_SECONDS", "1800"))  # 30 minutes idle
MAX_SESSIONS = int(os.environ.get("MAX_SESSIONS", "1000"))
SWEEP_INTERVAL_SECONDS = int(os.environ.get("SWEEP_INTERVAL_SECONDS", "300"))

# Response Validation
MIN_RESPONSE_LENGTH = 15
MAX_RESPONSE_LENGTH = 1500
EMPATHY_CHECK_MIN_LENGTH = 150  # Shorter responses skip the empathy check

# Enhancement Caps
MAX_COPING_STRATEGIES = 3
MAX_RENDERED_STRATEGIES = 2
MAX_RESOURCE_GROUPS = 1
MAX_RESOURCE_LINES = 3
MAX_FOLLOW_UPS = 2

# Crisis Escalation
ESCALATION_WINDOW_SECONDS = 30 * 60
CRISIS_SINK_TIMEOUT = 5.0  # Seconds before an alert delivery is abandoned

# Language Configuration
DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = {
    "en": "English",
    "mr": "Marathi",
    "hi": "Hindi",
}
