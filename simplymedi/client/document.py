"""
Document root for the SimplyMedi client.

Holds the observable attributes the UI shell renders from: the document
language, the text direction, and the current location. Listeners are
called with the attribute name and its new value after every change.
"""

from typing import Callable, List

from simplymedi.models.schemas import TextDirection
from simplymedi.utils.logger import get_logger

logger = get_logger("document")

DocumentListener = Callable[[str, str], None]


class DocumentRoot:
    """Observable `lang`, `dir` and `location` of the client document."""

    def __init__(self, lang: str = "english", location: str = "/"):
        self.lang = lang
        self.dir = TextDirection.LTR.value
        self.location = location
        self._listeners: List[DocumentListener] = []

    def subscribe(self, listener: DocumentListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def apply_language(self, lang: str, is_rtl: bool) -> None:
        """Set the `lang` and `dir` attributes for a language."""
        direction = TextDirection.RTL.value if is_rtl else TextDirection.LTR.value
        self._set("lang", lang)
        self._set("dir", direction)

    def navigate(self, location: str) -> None:
        """Move the document to another entry point."""
        logger.info("Navigating", location=location)
        self._set("location", location)

    def _set(self, attribute: str, value: str) -> None:
        if getattr(self, attribute) == value:
            return
        setattr(self, attribute, value)
        for listener in list(self._listeners):
            listener(attribute, value)
