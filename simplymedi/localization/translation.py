"""
Translation façade for the SimplyMedi client.

Every operation here treats the translation service as an optional
enhancement. Network errors, timeouts, non-2xx statuses and malformed
bodies never reach the caller: they resolve to a Fallback carrying the
original text (or the base language, or default formatting rules).
"""

from typing import Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

import httpx

from simplymedi.client.api_client import ApiClient
from simplymedi.localization.cache import CacheKey
from simplymedi.localization.catalog import BASE_LANGUAGE
from simplymedi.localization.outcome import Fallback, Ok, Outcome
from simplymedi.localization.state import Action, LocalizationState, SetTranslations
from simplymedi.models.schemas import (
    DetectLanguageRequest,
    DetectLanguageResponse,
    FormattingRules,
    FormattingRulesResponse,
    SimplifyRequest,
    SimplifyResponse,
    TranslateBatchRequest,
    TranslateBatchResponse,
    TranslateRequest,
    TranslateResponse,
    TranslateUIRequest,
    TranslateUIResponse,
)
from simplymedi.utils.logger import get_logger

logger = get_logger("translation")

K = TypeVar("K")

# Anything the service can do wrong: transport failures, bad statuses,
# undecodable JSON and bodies that do not match the response schema.
SOFT_FAIL_ERRORS = (httpx.HTTPError, ValueError)


class TranslationFacade:
    """Best-effort translation, detection and simplification."""

    def __init__(
        self,
        api: ApiClient,
        get_state: Callable[[], LocalizationState],
        dispatch: Callable[[Action], LocalizationState]
    ):
        self.api = api
        self._get_state = get_state
        self._dispatch = dispatch

    def _fallback(self, value, operation: str, error: Exception) -> Fallback:
        reason = f"{type(error).__name__}: {error}"
        logger.warning(f"{operation} failed, using fallback", operation=operation, error=reason)
        return Fallback(value, reason)

    async def translate_text(
        self,
        text: str,
        target_language: Optional[str] = None,
        source_language: str = "auto"
    ) -> Outcome[str]:
        """Translate free text, returning it unchanged when no work is needed."""
        state = self._get_state()
        target = target_language or state.current_language

        if not state.preferences.auto_translate or target == BASE_LANGUAGE or not text.strip():
            return Ok(text)

        request = TranslateRequest(text=text, target_language=target, source_language=source_language)
        try:
            data = await self.api.post("/languages/translate", json=request.model_dump(by_alias=True))
            result = TranslateResponse.model_validate(data)
        except SOFT_FAIL_ERRORS as e:
            return self._fallback(text, "Translation", e)

        return Ok(result.translated_text)

    async def translate_ui(self, text: str, context: str = "general") -> Outcome[str]:
        """Translate a UI string into the current language, read-through cached."""
        state = self._get_state()
        language = state.current_language

        if language == BASE_LANGUAGE or not text.strip():
            return Ok(text)

        key = CacheKey(text, language, context)
        cached = state.translations.get(key)
        if cached is not None:
            return Ok(cached)

        request = TranslateUIRequest(text=text, target_language=language, context=context)
        try:
            data = await self.api.post("/languages/translate-ui", json=request.model_dump(by_alias=True))
            result = TranslateUIResponse.model_validate(data)
        except SOFT_FAIL_ERRORS as e:
            return self._fallback(text, "UI translation", e)

        self._dispatch(SetTranslations({key: result.translated_text}))
        return Ok(result.translated_text)

    async def translate_ui_batch(
        self,
        texts: Sequence[str],
        context: str = "general"
    ) -> Outcome[Dict[str, str]]:
        """
        Translate several UI strings with at most one remote call.

        Cached strings are served locally and only the misses are sent.
        Strings the service leaves out of its reply are echoed back, and
        the outcome is then a Fallback naming how many were echoed.
        """
        state = self._get_state()
        language = state.current_language

        if language == BASE_LANGUAGE:
            return Ok({text: text for text in texts})

        translations: Dict[str, str] = {}
        misses: List[str] = []
        for text in texts:
            if text in translations or text in misses:
                continue
            cached = state.translations.get(CacheKey(text, language, context))
            if cached is not None:
                translations[text] = cached
            elif not text.strip():
                translations[text] = text
            else:
                misses.append(text)

        if not misses:
            return Ok(translations)

        request = TranslateBatchRequest(texts=misses, target_language=language, context=context)
        try:
            data = await self.api.post("/languages/translate-batch", json=request.model_dump(by_alias=True))
            result = TranslateBatchResponse.model_validate(data)
        except SOFT_FAIL_ERRORS as e:
            translations.update({text: text for text in misses})
            return self._fallback(translations, "Batch UI translation", e)

        fresh: Dict[CacheKey, str] = {}
        echoed = 0
        for text in misses:
            translated = result.translations.get(text)
            if translated is None:
                translations[text] = text
                echoed += 1
            else:
                translations[text] = translated
                fresh[CacheKey(text, language, context)] = translated

        if fresh:
            self._dispatch(SetTranslations(fresh))

        if echoed:
            logger.warning("Batch UI translation incomplete", requested=len(misses), echoed=echoed)
            return Fallback(translations, f"{echoed} of {len(misses)} texts not translated")

        return Ok(translations)

    async def translate_mapping(
        self,
        texts: Mapping[K, str],
        context: str = "general"
    ) -> Outcome[Dict[K, str]]:
        """Translate the values of a mapping (labels, placeholders...), keeping its keys."""
        outcome = await self.translate_ui_batch(list(texts.values()), context)
        translated = {key: outcome.value.get(text, text) for key, text in texts.items()}
        if isinstance(outcome, Fallback):
            return Fallback(translated, outcome.reason)
        return Ok(translated)

    async def detect_language(self, text: str) -> Outcome[str]:
        """Detect the language of a text, defaulting to the base language."""
        try:
            data = await self.api.post(
                "/languages/detect",
                json=DetectLanguageRequest(text=text).model_dump(by_alias=True)
            )
            result = DetectLanguageResponse.model_validate(data)
        except SOFT_FAIL_ERRORS as e:
            return self._fallback(BASE_LANGUAGE, "Language detection", e)

        return Ok(result.detected_language)

    async def simplify_medical_text(
        self,
        text: str,
        target_language: Optional[str] = None
    ) -> Outcome[str]:
        """Rewrite medical text in plain words, in the target language."""
        target = target_language or self._get_state().current_language

        request = SimplifyRequest(text=text, target_language=target)
        try:
            data = await self.api.post("/languages/simplify", json=request.model_dump(by_alias=True))
            result = SimplifyResponse.model_validate(data)
        except SOFT_FAIL_ERRORS as e:
            return self._fallback(text, "Medical text simplification", e)

        return Ok(result.simplified_text)

    async def get_formatting_rules(self, language: Optional[str] = None) -> Outcome[FormattingRules]:
        """Fetch formatting rules, defaulting to the base language's rules."""
        language = language or self._get_state().current_language
        try:
            data = await self.api.get(f"/languages/formatting-rules/{language}")
            result = FormattingRulesResponse.model_validate(data)
        except SOFT_FAIL_ERRORS as e:
            return self._fallback(FormattingRules(), "Formatting rules lookup", e)

        return Ok(result.formatting_rules)
