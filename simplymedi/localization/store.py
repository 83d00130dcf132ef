"""
Localization store for the SimplyMedi client.

LocalizationContext is the explicit context object handed to UI code. It
owns the current LocalizationState and funnels every change through the
reducer via `dispatch`. Side effects of a change live here:
- Persisting the language and preferences to durable storage
- Updating the document `lang`/`dir` attributes
- Best-effort syncing of preferences to the user profile endpoint
"""

from datetime import date
from typing import Any, Callable, List, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from simplymedi.client.api_client import ApiClient
from simplymedi.client.storage import (
    LANGUAGE_PREFERENCES_KEY,
    PREFERRED_LANGUAGE_KEY,
    SELECTED_LANGUAGE_KEY,
)
from simplymedi.localization import formatting
from simplymedi.localization.cache import CacheKey
from simplymedi.localization.catalog import BASE_LANGUAGE
from simplymedi.localization.state import (
    Action,
    LocalizationState,
    SetError,
    SetLanguage,
    SetLoading,
    SetPreferences,
    SetSupportedLanguages,
    reduce,
)
from simplymedi.localization.translation import TranslationFacade
from simplymedi.models.schemas import LanguagePreference, SupportedLanguagesResponse
from simplymedi.utils.logger import get_logger

logger = get_logger("localization")

StateListener = Callable[[LocalizationState], None]

PREFERENCES_ENDPOINT = "/users/language-preferences"


class LocalizationContext:
    """
    Current language, formatting preferences and translation cache.

    Usage:
        async with ApiClient(storage=JsonFileStorage(path)) as api:
            context = LocalizationContext(api)
            await context.initialize()
            await context.set_language("hindi")
            label = (await context.translator.translate_ui("Upload report", "button")).value
    """

    def __init__(self, api: ApiClient, state: Optional[LocalizationState] = None):
        self.api = api
        self.storage = api.storage
        self.document = api.document
        self._state = state or LocalizationState()
        self._listeners: List[StateListener] = []
        self._catalog_loaded = False
        self.translator = TranslationFacade(api, lambda: self._state, self.dispatch)

    @property
    def state(self) -> LocalizationState:
        return self._state

    @property
    def current_language(self) -> str:
        return self._state.current_language

    @property
    def is_rtl(self) -> bool:
        return self._state.is_rtl

    @property
    def preferences(self) -> LanguagePreference:
        return self._state.preferences

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every new state."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> LocalizationState:
        """Run an action through the reducer and notify listeners of changes."""
        previous = self._state
        self._state = reduce(previous, action)

        if self._state is previous:
            return self._state

        if (
            self._state.current_language != previous.current_language
            or self._state.is_rtl != previous.is_rtl
        ):
            self.document.apply_language(self._state.current_language, self._state.is_rtl)

        for listener in list(self._listeners):
            listener(self._state)

        return self._state

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self) -> LocalizationState:
        """Load the catalog and restore the saved language and preferences."""
        await self.load_supported_languages()

        saved_preferences = self._restore_preferences()
        if saved_preferences is not None:
            self.dispatch(SetPreferences(saved_preferences.model_dump()))

        saved_language = (
            self.storage.get_item(PREFERRED_LANGUAGE_KEY)
            or self.storage.get_item(SELECTED_LANGUAGE_KEY)
            or BASE_LANGUAGE
        )
        self.dispatch(SetLanguage(saved_language))
        self.document.apply_language(self._state.current_language, self._state.is_rtl)

        logger.info(
            "Localization initialized",
            language=self._state.current_language,
            is_rtl=self._state.is_rtl
        )
        return self._state

    def _restore_preferences(self) -> Optional[LanguagePreference]:
        raw = self.storage.get_item(LANGUAGE_PREFERENCES_KEY)
        if not raw:
            return None

        try:
            return LanguagePreference.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Stored language preferences are malformed, using defaults", error=str(e))
            return None

    async def load_supported_languages(self, force: bool = False) -> LocalizationState:
        """
        Load the supported language catalog once.

        On failure the built-in catalog stays in place and the state's
        `error` is set.
        """
        if self._catalog_loaded and not force:
            return self._state

        self.dispatch(SetLoading(True))
        try:
            data = await self.api.get("/languages/supported")
            catalog = SupportedLanguagesResponse.model_validate(data)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to load supported languages", error=str(e))
            return self.dispatch(SetError("Failed to load languages"))

        if not catalog.languages:
            logger.warning("Supported language catalog is empty, keeping built-in catalog")
            return self.dispatch(SetLoading(False))

        self._catalog_loaded = True
        return self.dispatch(SetSupportedLanguages(catalog.languages))

    # =========================================================================
    # Mutations
    # =========================================================================

    async def set_language(self, language: str) -> LocalizationState:
        """
        Switch the current language.

        A language outside the catalog is ignored and the state is returned
        unchanged. Otherwise the choice is persisted and, for signed-in
        users, saved to their profile on a best-effort basis.
        """
        if language not in self._state.supported_languages:
            logger.info("Ignoring unsupported language", language=language)
            return self._state

        self.dispatch(SetLanguage(language))
        self.storage.set_item(PREFERRED_LANGUAGE_KEY, language)
        self.storage.set_item(SELECTED_LANGUAGE_KEY, language)

        await self._sync_preferences({
            "primaryLanguage": language,
            "interfaceLanguage": language,
            "reportLanguage": language,
            "chatLanguage": language,
        })
        return self._state

    async def set_preferences(self, changes: Mapping[str, Any]) -> LocalizationState:
        """Shallow-merge preference changes and persist the full preference object."""
        previous = self._state
        state = self.dispatch(SetPreferences(changes))
        if state.preferences == previous.preferences:
            return state

        payload = state.preferences.model_dump(mode="json", by_alias=True)
        self.storage.set_item(LANGUAGE_PREFERENCES_KEY, state.preferences.model_dump_json(by_alias=True))
        await self._sync_preferences(payload)
        return state

    async def _sync_preferences(self, payload: Mapping[str, Any]) -> None:
        # TODO: decide with product whether failed syncs should be queued and retried
        if not self.api.is_authenticated:
            return

        try:
            await self.api.patch(PREFERENCES_ENDPOINT, json=dict(payload))
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Could not save language preference", error=str(e))

    # =========================================================================
    # Formatting
    # =========================================================================

    def format_date(self, value: Union[date, str]) -> str:
        prefs = self._state.preferences
        return formatting.format_date(
            value,
            locale=self._state.locale,
            time_format=prefs.time_format,
            timezone=prefs.timezone
        )

    def format_number(self, value: Union[int, float, str]) -> str:
        return formatting.format_number(value, self._state.preferences.number_format)

    def format_currency(self, amount: Union[int, float, str], currency: Optional[str] = None) -> str:
        return formatting.format_currency(
            amount,
            currency or self._state.preferences.currency,
            self._state.locale
        )

    def t(self, key: str, context: str = "general", **params: Any) -> str:
        """Cached translation of `key` in the current language, or `key` itself."""
        text = self._state.translations.get(CacheKey(key, self._state.current_language, context)) or key
        if not params:
            return text
        try:
            return text.format(**params)
        except (KeyError, IndexError, ValueError):
            logger.debug("Translation placeholders not filled", key=key)
            return text
