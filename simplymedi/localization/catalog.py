"""
Supported language catalog and per-language formatting rules.

Languages are keyed by their lowercase English name ("english", "arabic"),
which is the language code used throughout the API and in storage.
"""

from types import MappingProxyType
from typing import Mapping, Optional

from simplymedi.models.schemas import FormattingRules, SupportedLanguage, TextDirection

BASE_LANGUAGE = "english"

RTL_LANGUAGES = frozenset({"arabic"})

SUPPORTED_LANGUAGES: Mapping[str, SupportedLanguage] = MappingProxyType({
    "english": SupportedLanguage(name="English", native_name="English", code="en"),
    "hindi": SupportedLanguage(name="Hindi", native_name="हिन्दी", code="hi"),
    "bengali": SupportedLanguage(name="Bengali", native_name="বাংলা", code="bn"),
    "tamil": SupportedLanguage(name="Tamil", native_name="தமிழ்", code="ta"),
    "telugu": SupportedLanguage(name="Telugu", native_name="తెలుగు", code="te"),
    "gujarati": SupportedLanguage(name="Gujarati", native_name="ગુજરાતી", code="gu"),
    "kannada": SupportedLanguage(name="Kannada", native_name="ಕನ್ನಡ", code="kn"),
    "marathi": SupportedLanguage(name="Marathi", native_name="मराठी", code="mr"),
    "punjabi": SupportedLanguage(name="Punjabi", native_name="ਪੰਜਾਬੀ", code="pa"),
    "arabic": SupportedLanguage(name="Arabic", native_name="العربية", code="ar"),
    "french": SupportedLanguage(name="French", native_name="Français", code="fr"),
    "spanish": SupportedLanguage(name="Spanish", native_name="Español", code="es"),
    "chinese": SupportedLanguage(name="Chinese", native_name="中文", code="zh"),
    "german": SupportedLanguage(name="German", native_name="Deutsch", code="de"),
})

FORMATTING_RULES: Mapping[str, FormattingRules] = MappingProxyType({
    "arabic": FormattingRules(
        direction=TextDirection.RTL, number_format="ar-SA", date_format="ar-SA", currency="SAR"
    ),
    "hindi": FormattingRules(number_format="hi-IN", date_format="hi-IN", currency="INR"),
    "english": FormattingRules(number_format="en-US", date_format="en-US", currency="USD"),
    "french": FormattingRules(number_format="fr-FR", date_format="fr-FR", currency="EUR"),
    "spanish": FormattingRules(number_format="es-ES", date_format="es-ES", currency="EUR"),
    "chinese": FormattingRules(number_format="zh-CN", date_format="zh-CN", currency="CNY"),
})


def is_rtl(language: str) -> bool:
    """Whether a language is written right-to-left."""
    return language in RTL_LANGUAGES


def get_language(language: str) -> Optional[SupportedLanguage]:
    return SUPPORTED_LANGUAGES.get(language)


def get_formatting_rules(language: str) -> FormattingRules:
    """Formatting rules for a language, English rules when none are defined."""
    return FORMATTING_RULES.get(language.lower(), FORMATTING_RULES[BASE_LANGUAGE])
