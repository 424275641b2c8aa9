# Global analysis configuration shared across the CLI, the playground and the core
# Adjust these values based on the monitored network and the AI service quota

ANALYSIS_CONFIG = {
    "fallback_frequency_hz": 50.0,  # Used when zero-crossing estimation fails
    "harmonic_orders": range(2, 11),  # Harmonics included in THD (2nd..10th)
    "thd_epsilon": 1e-12,  # Floor for the fundamental magnitude
    "positive_sequence_window": (-180.0, 0.0),  # Open interval for V_L1->L2 / V_L2->L3
}

# Gemini generateContent endpoint (external analysis collaborator)
GEMINI_CONFIG = {
    "model": "gemini-1.5-flash",
    "endpoint": "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
    "api_key_env": "GEMINI_API_KEY",
    "timeout": 60.0,  # s, per HTTP request
    "max_attempts": 3,  # Attempts on HTTP 429 before giving up
    "base_delay": 1.0,  # s, exponential backoff base
    "analysis_generation": {
        "temperature": 0.1,
        "topK": 1,
        "topP": 1,
        "maxOutputTokens": 4096,
    },
    "decision_generation": {
        "temperature": 0.7,
        "topK": 40,
        "topP": 0.95,
        "maxOutputTokens": 1024,
    },
}

LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(levelname)s:%(name)s:%(message)s",
}
