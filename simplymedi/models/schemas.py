"""
Pydantic schemas for SimplyMedi.

Defines the language preference model shared by the client store and the
API, plus request/response models for the language endpoints. Field names
are snake_case in Python and camelCase on the wire and in durable storage.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict

from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Enums
# =============================================================================

class TranslationQuality(str, Enum):
    """Requested trade-off between translation speed and fidelity."""
    FAST = "fast"
    BALANCED = "balanced"
    ACCURATE = "accurate"


class TimeFormat(str, Enum):
    """Clock style used when rendering times."""
    TWELVE_HOUR = "12h"
    TWENTY_FOUR_HOUR = "24h"


class TextDirection(str, Enum):
    """Document text direction."""
    LTR = "ltr"
    RTL = "rtl"


# =============================================================================
# Language Catalog & Preferences
# =============================================================================

class SupportedLanguage(CamelModel):
    """One entry of the supported language catalog."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="English display name")
    native_name: str = Field(description="Display name in the language itself")
    code: str = Field(description="ISO 639-1 code")


class LanguagePreference(CamelModel):
    """User formatting and translation preferences."""

    auto_translate: bool = True
    translation_quality: TranslationQuality = TranslationQuality.BALANCED
    date_format: str = "MM/DD/YYYY"
    time_format: TimeFormat = TimeFormat.TWELVE_HOUR
    number_format: str = "en-US"
    currency: str = "USD"
    timezone: str = "UTC"

    model_config = ConfigDict(frozen=True)


class FormattingRules(CamelModel):
    """Locale formatting rules for a language."""

    direction: TextDirection = TextDirection.LTR
    number_format: str = "en-US"
    date_format: str = "en-US"
    currency: str = "USD"


# =============================================================================
# Requests
# =============================================================================

class DetectLanguageRequest(CamelModel):
    """Request to detect the language of a text."""

    text: str = Field(description="Text to inspect")


class TranslateRequest(CamelModel):
    """Request to translate free text."""

    text: str
    target_language: Optional[str] = None
    source_language: str = "auto"


class TranslateUIRequest(CamelModel):
    """Request to translate a single UI string."""

    text: str
    target_language: str
    context: str = "general"


class TranslateBatchRequest(CamelModel):
    """Request to translate several UI strings at once."""

    texts: List[str]
    target_language: str
    context: str = "general"


class SimplifyRequest(CamelModel):
    """Request to simplify medical text for patients."""

    text: str
    target_language: str = "english"


class UserLanguagePreferencesUpdate(CamelModel):
    """Partial update of a user's stored language preferences."""

    primary_language: Optional[str] = None
    secondary_languages: Optional[List[str]] = None
    interface_language: Optional[str] = None
    report_language: Optional[str] = None
    chat_language: Optional[str] = None
    auto_translate: Optional[bool] = None
    translation_quality: Optional[TranslationQuality] = None
    text_direction: Optional[TextDirection] = None
    date_format: Optional[str] = None
    time_format: Optional[TimeFormat] = None
    number_format: Optional[str] = None
    currency: Optional[str] = None
    timezone: Optional[str] = None


# =============================================================================
# Responses
# =============================================================================

class SupportedLanguagesResponse(CamelModel):
    """Catalog of supported languages."""

    languages: Dict[str, SupportedLanguage]
    count: int


class DetectLanguageResponse(CamelModel):
    """Result of language detection."""

    detected_language: str
    confidence: float = Field(ge=0.0, le=1.0)
    supported_language: Optional[SupportedLanguage] = None
    original_text: str


class TranslateResponse(CamelModel):
    """Result of a free-text translation."""

    original_text: str
    translated_text: str
    source_language: str
    target_language: str
    target_language_info: Optional[SupportedLanguage] = None


class TranslateUIResponse(CamelModel):
    """Result of a UI string translation."""

    original_text: str
    translated_text: str
    target_language: str
    context: str


class TranslateBatchResponse(CamelModel):
    """Result of a batch UI translation, keyed by source text."""

    translations: Dict[str, str]
    target_language: str
    context: str


class SimplifyResponse(CamelModel):
    """Result of medical text simplification."""

    original_text: str
    simplified_text: str
    target_language: str
    target_language_info: Optional[SupportedLanguage] = None


class FormattingRulesResponse(CamelModel):
    """Formatting rules for a language."""

    language: str
    formatting_rules: FormattingRules


class LanguageStatsResponse(CamelModel):
    """Usage statistics of the translation service."""

    most_used_language: str
    translations_count: int
    simplifications_count: int
    supported_languages_count: int
    cache_size: int


class UserLanguagePreferences(CamelModel):
    """Stored language preferences of a user."""

    primary_language: str = "english"
    secondary_languages: List[str] = Field(default_factory=list)
    interface_language: str = "english"
    report_language: str = "english"
    chat_language: str = "english"
    auto_translate: bool = True
    translation_quality: TranslationQuality = TranslationQuality.BALANCED
    text_direction: TextDirection = TextDirection.LTR
    date_format: str = "MM/DD/YYYY"
    time_format: TimeFormat = TimeFormat.TWELVE_HOUR
    number_format: str = "en-US"
    currency: str = "USD"
    timezone: str = "UTC"
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class UserLanguagePreferencesResponse(CamelModel):
    """Response after updating language preferences."""

    message: str = "Language preferences updated successfully"
    preferences: UserLanguagePreferences


# =============================================================================
# Health & Errors
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    version: str = Field(description="Application version")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(description="Error type")
    message: str = Field(description="Human-readable error message")
    error_code: str = Field(description="Machine-readable error code")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
