"""
SimplyMedi - Translation Service

Backs the language endpoints: translation of free text and UI strings,
language detection and patient-friendly simplification of medical text.
Uses an external language model when one is configured and falls back to
local behavior otherwise.

IMPORTANT: Simplified text is informational and does not replace the
interpretation of a qualified healthcare professional.
"""

import re
from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

from simplymedi.config import settings
from simplymedi.localization.cache import CacheKey, TranslationCache
from simplymedi.localization.catalog import (
    BASE_LANGUAGE,
    SUPPORTED_LANGUAGES,
    get_formatting_rules,
)
from simplymedi.models.schemas import FormattingRules, LanguageStatsResponse
from simplymedi.utils.logger import get_logger

logger = get_logger("translation_service")


class TranslationService:
    """
    Language model integration for translation and simplification.

    Every operation degrades to a local result instead of failing: the
    original text for translation, a glossary-based rewrite for
    simplification and script-based detection for language detection.
    """

    # Context descriptions used in UI translation prompts
    CONTEXT_DESCRIPTIONS = {
        "medical": "medical and healthcare",
        "button": "user interface button or action",
        "label": "form label or field name",
        "message": "notification or message",
        "navigation": "navigation menu item",
        "general": "general application",
    }

    # Unicode script ranges, checked in order. Marathi shares the
    # Devanagari block with Hindi and is reported as Hindi.
    SCRIPT_PATTERNS = [
        (re.compile(r"[\u0900-\u097F]"), "hindi"),
        (re.compile(r"[\u0600-\u06FF]"), "arabic"),
        (re.compile(r"[\u4E00-\u9FFF]"), "chinese"),
        (re.compile(r"[\u0980-\u09FF]"), "bengali"),
        (re.compile(r"[\u0B80-\u0BFF]"), "tamil"),
        (re.compile(r"[\u0C00-\u0C7F]"), "telugu"),
        (re.compile(r"[\u0A80-\u0AFF]"), "gujarati"),
        (re.compile(r"[\u0C80-\u0CFF]"), "kannada"),
        (re.compile(r"[\u0A00-\u0A7F]"), "punjabi"),
    ]

    # Text that is never sent for translation
    PRESERVE_PATTERNS = [
        re.compile(r"^[A-Z_]+$"),             # Constants
        re.compile(r"^\$\{.*\}$"),            # Template variables
        re.compile(r"^https?://"),            # URLs
        re.compile(r"^[0-9]+$"),              # Pure numbers
        re.compile(r"^#[0-9A-Fa-f]{6}$"),     # Hex colors
    ]

    # Medical jargon and abbreviations with plain-language equivalents
    PLAIN_TERMS = {
        "hypertension": "high blood pressure",
        "hypotension": "low blood pressure",
        "hyperglycemia": "high blood sugar",
        "hypoglycemia": "low blood sugar",
        "hyperlipidemia": "high blood fats",
        "tachycardia": "fast heart rate",
        "bradycardia": "slow heart rate",
        "myocardial infarction": "heart attack",
        "cerebrovascular accident": "stroke",
        "anemia": "low red blood cell count",
        "edema": "swelling",
        "dyspnea": "shortness of breath",
        "benign": "not cancerous",
        "malignant": "cancerous",
        "renal": "kidney",
        "hepatic": "liver",
        "pulmonary": "lung",
        "cardiac": "heart",
        "bilateral": "on both sides",
        "acute": "sudden",
        "chronic": "long-lasting",
        "prn": "as needed",
        "bid": "twice daily",
        "tid": "three times daily",
        "qid": "four times daily",
        "qd": "once daily",
        "po": "by mouth",
        "wbc": "white blood cell",
        "rbc": "red blood cell",
        "hgb": "hemoglobin",
        "bp": "blood pressure",
        "hr": "heart rate",
    }

    def __init__(self):
        """Initialize the translation service."""
        self.client = None
        self.model = "local"
        self.provider = "local"
        self.cache = TranslationCache(
            max_entries=settings.translation_cache_max_entries,
            ttl_seconds=settings.translation_cache_ttl_seconds
        )
        self.translations_count = 0
        self.simplifications_count = 0
        self.language_usage: Counter = Counter()
        self._plain_terms = [
            (re.compile(r"\b" + re.escape(term) + r"\b", re.IGNORECASE), plain)
            for term, plain in sorted(self.PLAIN_TERMS.items(), key=lambda item: -len(item[0]))
        ]
        self._initialize_external_provider()

    def _initialize_external_provider(self) -> None:
        """Attempt to initialize the external language model provider."""
        if not settings.gemini_api_key:
            logger.info("External provider not configured, using local translation")
            return

        try:
            from google import genai
            self.client = genai.Client(api_key=settings.gemini_api_key)
            self.provider = "external"
            self.model = settings.gemini_model
            logger.info("External provider initialized", model=self.model)
        except Exception as e:
            logger.info("Using local translation", reason=str(e))

    def _generate(self, prompt: str) -> Optional[str]:
        """Run a prompt on the external provider, None when unavailable."""
        if not self.client:
            return None

        try:
            response = self.client.models.generate_content(model=self.model, contents=prompt)
        except Exception as e:
            logger.info("External provider unavailable, using local", reason=str(e))
            return None

        text = (response.text or "").strip()
        return text or None

    # =========================================================================
    # Translation
    # =========================================================================

    @classmethod
    def should_preserve_text(cls, text: str) -> bool:
        """Whether a string is technical content that must not be translated."""
        return any(pattern.search(text) for pattern in cls.PRESERVE_PATTERNS)

    def translate(
        self,
        text: str,
        target_language: str,
        source_language: str = "auto"
    ) -> str:
        """
        Translate free text into a supported language.

        Returns the original text when no provider is available.
        """
        self.translations_count += 1
        self.language_usage[target_language] += 1

        if self.should_preserve_text(text):
            return text

        source = "the detected source language" if source_language == "auto" else source_language.title()
        prompt = f"""Translate the following text from {source} to {target_language.title()}.
Keep medical terms accurate and the tone calm and reassuring.
Return ONLY the translated text, no explanations.

Text:
{text}"""

        return self._generate(prompt) or text

    def translate_ui(self, text: str, target_language: str, context: str = "general") -> str:
        """Translate a UI string, cached per (text, language, context)."""
        if target_language == BASE_LANGUAGE or self.should_preserve_text(text):
            return text

        key = CacheKey(text, target_language, context)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Using cached translation", text=text, language=target_language)
            return cached

        self.translations_count += 1
        self.language_usage[target_language] += 1

        translation = self._generate(self._build_ui_prompt(text, target_language, context))
        if translation is None:
            return text

        self.cache.put(key, translation)
        return translation

    def _build_ui_prompt(self, text: str, target_language: str, context: str) -> str:
        """Build a context-aware UI translation prompt."""
        description = self.CONTEXT_DESCRIPTIONS.get(context, self.CONTEXT_DESCRIPTIONS["general"])

        return f"""You are a professional translator specializing in UI/UX and {description} terminology.

Translate the following English text to {target_language.title()}:
"{text}"

Requirements:
1. Maintain the same tone and formality level
2. Keep it concise and UI-friendly (same length if possible)
3. Use appropriate {description} terminology
4. For buttons/actions, use imperative form
5. Preserve any placeholders like {{name}}, {{count}}, etc.
6. Return ONLY the translated text, no explanations

Translation:"""

    def translate_batch(
        self,
        texts: Sequence[str],
        target_language: str,
        context: str = "general"
    ) -> Dict[str, str]:
        """Translate several UI strings, keyed by source text."""
        return {text: self.translate_ui(text, target_language, context) for text in texts}

    # =========================================================================
    # Simplification
    # =========================================================================

    def simplify(self, text: str, target_language: str = BASE_LANGUAGE) -> str:
        """Rewrite medical text in plain language, in the target language."""
        self.simplifications_count += 1
        self.language_usage[target_language] += 1

        prompt = f"""Rewrite the following medical text so a patient without medical training
can understand it. Write in {target_language.title()}.

IMPORTANT GUIDELINES:
- Do not provide medical diagnoses
- Use neutral, non-alarming language
- Explain medical terms in plain words
- Recommend consulting a healthcare provider

TEXT:
{text[:4000]}"""

        simplified = self._generate(prompt)
        if simplified is not None:
            return simplified

        return self._simplify_locally(text)

    def _simplify_locally(self, text: str) -> str:
        """Replace known jargon with plain-language equivalents."""
        simplified = text
        for pattern, plain in self._plain_terms:
            simplified = pattern.sub(plain, simplified)
        return simplified

    # =========================================================================
    # Detection & Formatting
    # =========================================================================

    def detect_language(self, text: str) -> Tuple[str, float]:
        """Detect the language of a text. Returns (language, confidence)."""
        languages = ", ".join(f'"{language}"' for language in SUPPORTED_LANGUAGES)
        prompt = f"""Detect the language of the following text and respond with only the language name
in lowercase English (one of: {languages}).

Text: {text[:1000]}

Language:"""

        detected = self._generate(prompt)
        if detected is not None:
            detected = detected.strip().strip('."').lower()
            if detected in SUPPORTED_LANGUAGES:
                return detected, 0.9

        return self._detect_by_script(text), 0.5

    def _detect_by_script(self, text: str) -> str:
        for pattern, language in self.SCRIPT_PATTERNS:
            if pattern.search(text):
                return language
        return BASE_LANGUAGE

    def formatting_rules(self, language: str) -> FormattingRules:
        return get_formatting_rules(language)

    # =========================================================================
    # Status
    # =========================================================================

    def stats(self) -> LanguageStatsResponse:
        most_used: List[Tuple[str, int]] = self.language_usage.most_common(1)
        return LanguageStatsResponse(
            most_used_language=most_used[0][0] if most_used else BASE_LANGUAGE,
            translations_count=self.translations_count,
            simplifications_count=self.simplifications_count,
            supported_languages_count=len(SUPPORTED_LANGUAGES),
            cache_size=len(self.cache)
        )

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Translation cache cleared")


# Module-level singleton
_service_instance: Optional[TranslationService] = None


def get_translation_service() -> TranslationService:
    """Get or create singleton translation service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = TranslationService()
    return _service_instance
