"""
Configuration settings for the SickoHoops quiz application.

Loads settings from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent

# Debug mode
DEBUG = os.getenv("DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# Generative providers, tried in this order after the curated and live sources
GENERATIVE_PROVIDERS = [
    name.strip().lower()
    for name in os.getenv("GENERATIVE_PROVIDERS", "openai,anthropic").split(",")
    if name.strip()
]
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "60"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))

# OpenAI settings
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")

# Anthropic settings
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-3-haiku-20240307")
ANTHROPIC_MAX_TOKENS = int(os.getenv("ANTHROPIC_MAX_TOKENS", "4000"))

# Ollama settings (optional local provider)
OLLAMA_HOST = os.getenv("OLLAMA_HOST", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1")

# NBA stats settings
# stats.nba.com rate-limits aggressively, keep the delay at 500ms or more
NBA_STATS_BASE_URL = os.getenv("NBA_STATS_BASE_URL", "https://stats.nba.com/stats")
STATS_REQUEST_TIMEOUT = float(os.getenv("STATS_REQUEST_TIMEOUT", "10"))
STATS_REQUEST_DELAY = float(os.getenv("STATS_REQUEST_DELAY", "0.5"))

# Quiz settings
DEFAULT_TIME_LIMIT = int(os.getenv("DEFAULT_TIME_LIMIT", "1200"))

# API settings
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))


def validate_config():
    """Validate the configuration settings."""
    errors = []

    known = {"openai", "anthropic", "ollama"}
    for name in GENERATIVE_PROVIDERS:
        if name not in known:
            errors.append(f"Unknown generative provider: {name}")

    if "openai" in GENERATIVE_PROVIDERS and not OPENAI_API_KEY:
        errors.append("OPENAI_API_KEY is not set but 'openai' is a configured provider")

    if "anthropic" in GENERATIVE_PROVIDERS and not ANTHROPIC_API_KEY:
        errors.append("ANTHROPIC_API_KEY is not set but 'anthropic' is a configured provider")

    if STATS_REQUEST_DELAY < 0:
        errors.append(f"STATS_REQUEST_DELAY must not be negative: {STATS_REQUEST_DELAY}")

    if errors:
        for error in errors:
            print(f"Config Error: {error}")
        return False

    return True


if __name__ == "__main__":
    print("Configuration Settings")
    print("=" * 50)
    print(f"PROJECT_ROOT: {PROJECT_ROOT}")
    print(f"DEBUG: {DEBUG}")
    print(f"LOG_LEVEL: {LOG_LEVEL}")
    print(f"GENERATIVE_PROVIDERS: {GENERATIVE_PROVIDERS}")
    print(f"OPENAI_MODEL: {OPENAI_MODEL}")
    print(f"ANTHROPIC_MODEL: {ANTHROPIC_MODEL}")
    print(f"OLLAMA_HOST: {OLLAMA_HOST}")
    print(f"OLLAMA_MODEL: {OLLAMA_MODEL}")
    print(f"NBA_STATS_BASE_URL: {NBA_STATS_BASE_URL}")
    print(f"STATS_REQUEST_TIMEOUT: {STATS_REQUEST_TIMEOUT}")
    print(f"STATS_REQUEST_DELAY: {STATS_REQUEST_DELAY}")
    print(f"DEFAULT_TIME_LIMIT: {DEFAULT_TIME_LIMIT}")
    print(f"API_HOST: {API_HOST}")
    print(f"API_PORT: {API_PORT}")
    print("=" * 50)
    print(f"Config valid: {validate_config()}")
