"""Defines common Value Objects used across different domain contexts.

These objects represent simple values like provider names, roles, cache
keys and token counts, ensuring consistency across adapters and services.
"""

from typing import NewType

# === Core Value Objects ===

ProviderName = NewType("ProviderName", str)    # 'openai', 'gemini', 'mock'
ModelName = NewType("ModelName", str)          # e.g. 'gpt-3.5-turbo'
MessageRole = NewType("MessageRole", str)      # 'system', 'user', 'assistant'
LanguageCode = NewType("LanguageCode", str)    # 'en', 'zh-TW'
SessionID = NewType("SessionID", str)

# === Caching Context ===
CacheKey = NewType("CacheKey", str)

# === Token Management ===
TokenCount = NewType("TokenCount", int)

# --- Known Values ---
PROVIDER_OPENAI = ProviderName("openai")
PROVIDER_GEMINI = ProviderName("gemini")
PROVIDER_MOCK = ProviderName("mock")
KNOWN_PROVIDERS = (PROVIDER_OPENAI, PROVIDER_GEMINI, PROVIDER_MOCK)

ROLE_SYSTEM = MessageRole("system")
ROLE_USER = MessageRole("user")
ROLE_ASSISTANT = MessageRole("assistant")

LANGUAGE_ENGLISH = LanguageCode("en")
LANGUAGE_TRADITIONAL_CHINESE = LanguageCode("zh-TW")

MOCK_MODEL = ModelName("mock-model")


def is_traditional_chinese(language: str) -> bool:
    """True for the Traditional Chinese tag, compared case-insensitively."""
    return (language or "").lower() == LANGUAGE_TRADITIONAL_CHINESE.lower()
