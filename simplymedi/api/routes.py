"""
API routes for SimplyMedi.

Defines the language endpoints consumed by the client localization layer
and the user language preference endpoint.
"""

from fastapi import APIRouter, HTTPException, Request

from simplymedi.api.middleware import limiter
from simplymedi.config import settings
from simplymedi.localization.catalog import SUPPORTED_LANGUAGES, get_language
from simplymedi.models.schemas import (
    DetectLanguageRequest,
    DetectLanguageResponse,
    ErrorResponse,
    FormattingRulesResponse,
    HealthResponse,
    LanguageStatsResponse,
    SimplifyRequest,
    SimplifyResponse,
    SupportedLanguagesResponse,
    TranslateBatchRequest,
    TranslateBatchResponse,
    TranslateRequest,
    TranslateResponse,
    TranslateUIRequest,
    TranslateUIResponse,
    UserLanguagePreferences,
    UserLanguagePreferencesResponse,
    UserLanguagePreferencesUpdate,
)
from simplymedi.services.translation_service import get_translation_service
from simplymedi.services.user_preferences import get_user_preference_store
from simplymedi.utils.logger import get_logger

logger = get_logger("routes")

# Root routes (health) and /api routes
router = APIRouter()
api_router = APIRouter()

RATE_LIMIT = f"{settings.rate_limit_per_minute}/minute"


def require_text(text: str, purpose: str) -> None:
    """Reject empty or whitespace-only text."""
    if not text or not text.strip():
        raise HTTPException(status_code=400, detail=f"Text is required for {purpose}")


def require_supported_language(language: str) -> None:
    """Reject languages outside the supported catalog."""
    if language not in SUPPORTED_LANGUAGES:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Unsupported target language",
                "supportedLanguages": list(SUPPORTED_LANGUAGES),
            }
        )


def require_user(request: Request) -> str:
    """Return the caller's user id, 401 for anonymous requests and rejected tokens."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        detail = getattr(request.state, "auth_error", None) or "Access token required"
        raise HTTPException(status_code=401, detail=detail)
    return user_id


# =============================================================================
# Health Check
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["System"],
    summary="Health check endpoint"
)
async def health_check():
    """Check if the service is healthy and running."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version
    )


# =============================================================================
# Languages
# =============================================================================
# Endpoints that may call the external provider are plain functions: the
# provider client blocks, so FastAPI runs them in its threadpool.

@api_router.get(
    "/languages/supported",
    response_model=SupportedLanguagesResponse,
    tags=["Languages"],
    summary="List supported languages"
)
async def supported_languages():
    return SupportedLanguagesResponse(
        languages=dict(SUPPORTED_LANGUAGES),
        count=len(SUPPORTED_LANGUAGES)
    )


@api_router.post(
    "/languages/detect",
    response_model=DetectLanguageResponse,
    tags=["Languages"],
    summary="Detect the language of a text",
    responses={400: {"model": ErrorResponse, "description": "Empty text"}}
)
@limiter.limit(RATE_LIMIT)
def detect_language(request: Request, body: DetectLanguageRequest):
    require_text(body.text, "language detection")

    detected, confidence = get_translation_service().detect_language(body.text)

    return DetectLanguageResponse(
        detected_language=detected,
        confidence=confidence,
        supported_language=get_language(detected),
        original_text=body.text
    )


@api_router.post(
    "/languages/translate",
    response_model=TranslateResponse,
    tags=["Languages"],
    summary="Translate text",
    responses={400: {"model": ErrorResponse, "description": "Invalid request"}}
)
@limiter.limit(RATE_LIMIT)
def translate(request: Request, body: TranslateRequest):
    """
    Translate free text into a supported language.

    When no translation provider is available the original text is
    returned as the translation.
    """
    require_text(body.text, "translation")
    if not body.target_language:
        raise HTTPException(status_code=400, detail="Target language is required")
    require_supported_language(body.target_language)

    translated = get_translation_service().translate(
        body.text,
        body.target_language,
        body.source_language
    )

    return TranslateResponse(
        original_text=body.text,
        translated_text=translated,
        source_language=body.source_language,
        target_language=body.target_language,
        target_language_info=get_language(body.target_language)
    )


@api_router.post(
    "/languages/translate-ui",
    response_model=TranslateUIResponse,
    tags=["Languages"],
    summary="Translate a UI string"
)
@limiter.limit(RATE_LIMIT)
def translate_ui(request: Request, body: TranslateUIRequest):
    require_text(body.text, "translation")
    require_supported_language(body.target_language)

    translated = get_translation_service().translate_ui(
        body.text,
        body.target_language,
        body.context
    )

    return TranslateUIResponse(
        original_text=body.text,
        translated_text=translated,
        target_language=body.target_language,
        context=body.context
    )


@api_router.post(
    "/languages/translate-batch",
    response_model=TranslateBatchResponse,
    tags=["Languages"],
    summary="Translate several UI strings"
)
@limiter.limit(RATE_LIMIT)
def translate_batch(request: Request, body: TranslateBatchRequest):
    if not body.texts:
        raise HTTPException(status_code=400, detail="At least one text is required")
    require_supported_language(body.target_language)

    translations = get_translation_service().translate_batch(
        body.texts,
        body.target_language,
        body.context
    )

    logger.info(
        "Batch translated",
        count=len(body.texts),
        target_language=body.target_language,
        context=body.context
    )

    return TranslateBatchResponse(
        translations=translations,
        target_language=body.target_language,
        context=body.context
    )


@api_router.post(
    "/languages/simplify",
    response_model=SimplifyResponse,
    tags=["Languages"],
    summary="Simplify medical text for patients",
    responses={400: {"model": ErrorResponse, "description": "Invalid request"}}
)
@limiter.limit(RATE_LIMIT)
def simplify(request: Request, body: SimplifyRequest):
    """
    Rewrite medical text in plain language.

    **Important**: Simplified text is informational. It does not replace
    the interpretation of a healthcare provider.
    """
    require_text(body.text, "simplification")
    require_supported_language(body.target_language)

    simplified = get_translation_service().simplify(body.text, body.target_language)

    return SimplifyResponse(
        original_text=body.text,
        simplified_text=simplified,
        target_language=body.target_language,
        target_language_info=get_language(body.target_language)
    )


@api_router.get(
    "/languages/formatting-rules/{language}",
    response_model=FormattingRulesResponse,
    tags=["Languages"],
    summary="Get formatting rules for a language"
)
async def formatting_rules(language: str):
    """Languages without specific rules get the English rules."""
    return FormattingRulesResponse(
        language=language,
        formatting_rules=get_translation_service().formatting_rules(language)
    )


@api_router.get(
    "/languages/stats",
    response_model=LanguageStatsResponse,
    tags=["Languages"],
    summary="Get translation statistics"
)
async def language_stats():
    return get_translation_service().stats()


# =============================================================================
# User Preferences
# =============================================================================

@api_router.get(
    "/users/language-preferences",
    response_model=UserLanguagePreferences,
    tags=["Users"],
    summary="Get the caller's language preferences",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}}
)
async def get_language_preferences(request: Request):
    user_id = require_user(request)
    return get_user_preference_store().get(user_id) or UserLanguagePreferences()


@api_router.patch(
    "/users/language-preferences",
    response_model=UserLanguagePreferencesResponse,
    tags=["Users"],
    summary="Update the caller's language preferences",
    responses={
        400: {"model": ErrorResponse, "description": "Unsupported language"},
        401: {"model": ErrorResponse, "description": "Not authenticated"}
    }
)
async def update_language_preferences(request: Request, body: UserLanguagePreferencesUpdate):
    user_id = require_user(request)

    try:
        record = get_user_preference_store().update(user_id, body)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return UserLanguagePreferencesResponse(preferences=record)
