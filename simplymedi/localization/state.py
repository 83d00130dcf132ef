"""
Localization state and its reducer.

The state is immutable. Every change is expressed as an action and applied
by `reduce`, which is a pure function: it never touches storage, the
network or the document. Side effects belong to LocalizationContext.

SetTranslations copies the whole translation cache, so adding N strings one
at a time costs O(N^2). Warm the cache with one SetTranslations per batch
(TranslationFacade.translate_ui_batch and translate_mapping do) rather than
one per string.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from simplymedi.localization.cache import CacheKey, TranslationCache
from simplymedi.localization.catalog import BASE_LANGUAGE, SUPPORTED_LANGUAGES, is_rtl
from simplymedi.models.schemas import LanguagePreference, SupportedLanguage


@dataclass(frozen=True)
class LocalizationState:
    """Snapshot of the client's localization state."""

    current_language: str = BASE_LANGUAGE
    supported_languages: Mapping[str, SupportedLanguage] = field(
        default_factory=lambda: SUPPORTED_LANGUAGES
    )
    preferences: LanguagePreference = field(default_factory=LanguagePreference)
    translations: TranslationCache = field(default_factory=TranslationCache)
    loading: bool = False
    error: Optional[str] = None

    @property
    def is_rtl(self) -> bool:
        return is_rtl(self.current_language)

    @property
    def locale(self) -> str:
        """Locale code of the current language, e.g. "en"."""
        language = self.supported_languages.get(self.current_language)
        return language.code if language else "en"


# =============================================================================
# Actions
# =============================================================================

@dataclass(frozen=True)
class SetLoading:
    loading: bool


@dataclass(frozen=True)
class SetError:
    message: Optional[str]


@dataclass(frozen=True)
class SetSupportedLanguages:
    languages: Mapping[str, SupportedLanguage]


@dataclass(frozen=True)
class SetLanguage:
    language: str


@dataclass(frozen=True)
class SetPreferences:
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class SetTranslations:
    entries: Mapping[CacheKey, str]


Action = Union[
    SetLoading, SetError, SetSupportedLanguages, SetLanguage, SetPreferences, SetTranslations
]


def merge_preferences(
    current: LanguagePreference,
    changes: Mapping[str, Any]
) -> LanguagePreference:
    """
    Shallow-merge `changes` into `current`.

    Keys may be field names (`time_format`) or their camelCase aliases
    (`timeFormat`); unknown keys are ignored.

    Raises:
        pydantic.ValidationError: A value is not valid for its field
    """
    fields = LanguagePreference.model_fields
    by_alias = {info.alias: name for name, info in fields.items() if info.alias}

    update: Dict[str, Any] = {}
    for key, value in changes.items():
        name = key if key in fields else by_alias.get(key)
        if name is not None:
            update[name] = value

    return LanguagePreference.model_validate({**current.model_dump(), **update})


def reduce(state: LocalizationState, action: Action) -> LocalizationState:
    """Apply one action to the state and return the new state."""
    if isinstance(action, SetLoading):
        return replace(state, loading=action.loading)

    if isinstance(action, SetError):
        return replace(state, error=action.message, loading=False)

    if isinstance(action, SetSupportedLanguages):
        return replace(state, supported_languages=dict(action.languages), loading=False)

    if isinstance(action, SetLanguage):
        # Unknown languages are ignored
        if action.language not in state.supported_languages:
            return state
        return replace(state, current_language=action.language)

    if isinstance(action, SetPreferences):
        try:
            preferences = merge_preferences(state.preferences, action.changes)
        except ValidationError as e:
            return replace(state, error=f"Invalid preferences: {e.error_count()} error(s)")
        return replace(state, preferences=preferences)

    if isinstance(action, SetTranslations):
        return replace(state, translations=state.translations.merged(dict(action.entries)))

    return state
