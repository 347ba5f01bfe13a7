"""Global configuration constants for DebateAI.

These values centralize model, timeout, word limits, and file paths.
"""
import os

# Model settings
MODEL_NAME = os.environ.get("OLLAMA_MODEL", "llama3:8b")
OLLAMA_HOST = os.environ.get("OLLAMA_HOST", "http://127.0.0.1:11434")
TEMPERATURES = {
    "opponent": 0.7,
    "judge": 0.0,
    "topic": 0.0,
}

# Skip the model entirely and always use deterministic fallbacks
USE_FALLBACK = os.environ.get("DEBATE_USE_FALLBACK", "false").strip().lower() in {"1", "true", "yes"}

# Remote call limits; an expired call is treated like an unreachable server
LLM_TIMEOUT_SECONDS = float(os.environ.get("DEBATE_LLM_TIMEOUT", "60"))
LLM_MAX_ATTEMPTS = 1

# Word limits
WORD_CAP = 180
TRUNCATION_BOUNDARY_RATIO = 0.8

# Token limits (word count * 1.33 for approximation)
TOKENS_PER_WORD = 1.33
MAX_TOKENS_GRADING = 400
MAX_TOKENS_TOPIC = 200

# Debate settings
NUM_ROUNDS = 4
FALLBACK_CRITERION_SCORE = 3
MAX_CRITERION_SCORE = 5

# File paths
LOG_FILE = os.environ.get("DEBATE_LOG_FILE", "logs/debug.log")
CLEAR_LOGS_ON_START = True
CLIENT_BUILD_DIR = os.environ.get("DEBATE_CLIENT_DIR", "client/build")

# Server
APP_TITLE = "DebateAI Unified Server"
APP_VERSION = "2.0.0"
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3002",
    "http://127.0.0.1:3000",
]
