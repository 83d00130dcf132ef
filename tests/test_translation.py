"""
Tests for the client translation façade.

The translation service is optional: every failure must resolve to a
Fallback carrying a usable value instead of raising.
"""

import json

import httpx
import pytest

from simplymedi.localization.cache import CacheKey
from simplymedi.localization.outcome import Fallback, Ok
from simplymedi.localization.state import SetLanguage, SetPreferences
from simplymedi.models.schemas import TextDirection


def echo_ui(prefix):
    """Handler translating a UI string by prefixing it."""
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(200, json={
            "originalText": body["text"],
            "translatedText": f"{prefix}{body['text']}",
            "targetLanguage": body["targetLanguage"],
            "context": body["context"],
        })
    return handler


def batch_handler(prefix, skip=()):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(200, json={
            "translations": {
                text: f"{prefix}{text}" for text in body["texts"] if text not in skip
            },
            "targetLanguage": body["targetLanguage"],
            "context": body["context"],
        })
    return handler


def raise_connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def hindi(context):
    context.dispatch(SetLanguage("hindi"))
    return context


class TestTranslateText:

    @pytest.mark.asyncio
    async def test_english_target_is_identity(self, context, backend):
        outcome = await context.translator.translate_text("Take with food", "english")

        assert outcome == Ok("Take with food")
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_auto_translate_off_is_identity(self, hindi, backend):
        hindi.dispatch(SetPreferences({"autoTranslate": False}))

        outcome = await hindi.translator.translate_text("Take with food")

        assert outcome == Ok("Take with food")
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_blank_text_is_identity(self, hindi, backend):
        assert await hindi.translator.translate_text("   ") == Ok("   ")
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_translated(self, hindi, backend):
        backend.on("POST", "/languages/translate", json_body={
            "originalText": "Take with food",
            "translatedText": "भोजन के साथ लें",
            "sourceLanguage": "auto",
            "targetLanguage": "hindi",
        })

        outcome = await hindi.translator.translate_text("Take with food")

        assert outcome == Ok("भोजन के साथ लें")
        sent = json.loads(backend.calls_to("/languages/translate")[0].content)
        assert sent == {"text": "Take with food", "targetLanguage": "hindi", "sourceLanguage": "auto"}

    @pytest.mark.asyncio
    async def test_server_error_falls_back(self, hindi, backend):
        backend.on("POST", "/languages/translate", status=500, json_body={"error": "boom"})

        outcome = await hindi.translator.translate_text("Take with food")

        assert isinstance(outcome, Fallback)
        assert outcome.value == "Take with food"
        assert "HTTPStatusError" in outcome.reason

    @pytest.mark.asyncio
    async def test_network_error_falls_back(self, hindi, backend):
        backend.on("POST", "/languages/translate", handler=raise_connect_error)

        outcome = await hindi.translator.translate_text("Take with food")

        assert outcome.ok is False
        assert outcome.value == "Take with food"

    @pytest.mark.asyncio
    async def test_malformed_body_falls_back(self, hindi, backend):
        backend.on("POST", "/languages/translate", json_body={"unexpected": True})

        outcome = await hindi.translator.translate_text("Take with food")

        assert isinstance(outcome, Fallback)
        assert outcome.value == "Take with food"


class TestTranslateUI:

    @pytest.mark.asyncio
    async def test_english_is_identity(self, context, backend):
        assert await context.translator.translate_ui("Save", "button") == Ok("Save")
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(self, hindi, backend):
        backend.on("POST", "/languages/translate-ui", handler=echo_ui("hi:"))

        first = await hindi.translator.translate_ui("Save", "button")
        second = await hindi.translator.translate_ui("Save", "button")

        assert first == second == Ok("hi:Save")
        assert len(backend.calls_to("/languages/translate-ui")) == 1
        assert hindi.state.translations.get(CacheKey("Save", "hindi", "button")) == "hi:Save"

    @pytest.mark.asyncio
    async def test_context_is_part_of_key(self, hindi, backend):
        backend.on("POST", "/languages/translate-ui", handler=echo_ui("hi:"))

        await hindi.translator.translate_ui("Save", "button")
        await hindi.translator.translate_ui("Save", "label")

        assert len(backend.calls_to("/languages/translate-ui")) == 2

    @pytest.mark.asyncio
    async def test_cached_translation_survives_language_switch(self, hindi, backend):
        backend.on("POST", "/languages/translate-ui", handler=echo_ui("x:"))

        await hindi.translator.translate_ui("Save")
        hindi.dispatch(SetLanguage("french"))
        await hindi.translator.translate_ui("Save")
        hindi.dispatch(SetLanguage("hindi"))
        await hindi.translator.translate_ui("Save")

        assert len(backend.calls_to("/languages/translate-ui")) == 2

    @pytest.mark.asyncio
    async def test_failure_not_cached(self, hindi, backend):
        backend.on("POST", "/languages/translate-ui", status=502, json_body={"error": "bad gateway"})

        outcome = await hindi.translator.translate_ui("Save")

        assert outcome == Fallback("Save", outcome.reason)
        assert len(hindi.state.translations) == 0


class TestTranslateUIBatch:

    @pytest.mark.asyncio
    async def test_only_misses_are_sent(self, hindi, backend):
        backend.on("POST", "/languages/translate-ui", handler=echo_ui("hi:"))
        backend.on("POST", "/languages/translate-batch", handler=batch_handler("hi:"))
        await hindi.translator.translate_ui("Home", "navigation")

        outcome = await hindi.translator.translate_ui_batch(["Home", "Reports", "Reports"], "navigation")

        assert outcome == Ok({"Home": "hi:Home", "Reports": "hi:Reports"})
        sent = json.loads(backend.calls_to("/languages/translate-batch")[0].content)
        assert sent["texts"] == ["Reports"]

    @pytest.mark.asyncio
    async def test_batch_updates_cache_once(self, hindi, backend):
        backend.on("POST", "/languages/translate-batch", handler=batch_handler("hi:"))
        texts = [f"Label {index}" for index in range(50)]
        updates = []
        hindi.subscribe(updates.append)

        outcome = await hindi.translator.translate_ui_batch(texts, "form")

        assert len(outcome.value) == 50
        assert len(updates) == 1
        assert len(hindi.state.translations) == 50
        assert hindi.state.translations.get(CacheKey("Label 7", "hindi", "form")) == "hi:Label 7"

    @pytest.mark.asyncio
    async def test_all_cached_makes_no_call(self, hindi, backend):
        backend.on("POST", "/languages/translate-batch", handler=batch_handler("hi:"))
        await hindi.translator.translate_ui_batch(["Home"])

        await hindi.translator.translate_ui_batch(["Home"])

        assert len(backend.calls_to("/languages/translate-batch")) == 1

    @pytest.mark.asyncio
    async def test_partial_reply_echoes_missing(self, hindi, backend):
        backend.on("POST", "/languages/translate-batch", handler=batch_handler("hi:", skip={"Settings"}))

        outcome = await hindi.translator.translate_ui_batch(["Home", "Settings"])

        assert isinstance(outcome, Fallback)
        assert outcome.value == {"Home": "hi:Home", "Settings": "Settings"}
        assert hindi.state.translations.get(CacheKey("Settings", "hindi")) is None

    @pytest.mark.asyncio
    async def test_total_failure_echoes_everything(self, hindi, backend):
        backend.on("POST", "/languages/translate-batch", handler=raise_connect_error)

        outcome = await hindi.translator.translate_ui_batch(["Home", "Settings"])

        assert isinstance(outcome, Fallback)
        assert outcome.value == {"Home": "Home", "Settings": "Settings"}

    @pytest.mark.asyncio
    async def test_english_is_identity(self, context, backend):
        outcome = await context.translator.translate_ui_batch(["Home", "Settings"])

        assert outcome == Ok({"Home": "Home", "Settings": "Settings"})
        assert backend.calls == []


class TestTranslateMapping:

    @pytest.mark.asyncio
    async def test_keys_preserved(self, hindi, backend):
        backend.on("POST", "/languages/translate-batch", handler=batch_handler("hi:"))

        outcome = await hindi.translator.translate_mapping(
            {"title": "Upload report", "submit": "Upload"}, "button"
        )

        assert outcome == Ok({"title": "hi:Upload report", "submit": "hi:Upload"})

    @pytest.mark.asyncio
    async def test_failure_keeps_source_values(self, hindi, backend):
        backend.on("POST", "/languages/translate-batch", status=500, json_body={})

        outcome = await hindi.translator.translate_mapping({"title": "Upload report"})

        assert isinstance(outcome, Fallback)
        assert outcome.value == {"title": "Upload report"}


class TestDetectAndSimplify:

    @pytest.mark.asyncio
    async def test_detect(self, context, backend):
        backend.on("POST", "/languages/detect", json_body={
            "detectedLanguage": "tamil",
            "confidence": 0.9,
            "originalText": "வணக்கம்",
        })

        assert await context.translator.detect_language("வணக்கம்") == Ok("tamil")

    @pytest.mark.asyncio
    async def test_detect_falls_back_to_english(self, context, backend):
        backend.on("POST", "/languages/detect", status=500, json_body={"error": "boom"})

        outcome = await context.translator.detect_language("வணக்கம்")

        assert isinstance(outcome, Fallback)
        assert outcome.value == "english"

    @pytest.mark.asyncio
    async def test_simplify_targets_current_language(self, hindi, backend):
        backend.on("POST", "/languages/simplify", json_body={
            "originalText": "Hypertension",
            "simplifiedText": "उच्च रक्तचाप",
            "targetLanguage": "hindi",
        })

        outcome = await hindi.translator.simplify_medical_text("Hypertension")

        assert outcome == Ok("उच्च रक्तचाप")
        sent = json.loads(backend.calls_to("/languages/simplify")[0].content)
        assert sent["targetLanguage"] == "hindi"

    @pytest.mark.asyncio
    async def test_simplify_falls_back_to_original(self, context, backend):
        backend.on("POST", "/languages/simplify", handler=raise_connect_error)

        outcome = await context.translator.simplify_medical_text("Hypertension")

        assert isinstance(outcome, Fallback)
        assert outcome.value == "Hypertension"


class TestFormattingRules:

    @pytest.mark.asyncio
    async def test_rules_for_language(self, context, backend):
        backend.on("GET", "/languages/formatting-rules/arabic", json_body={
            "language": "arabic",
            "formattingRules": {
                "direction": "rtl",
                "numberFormat": "ar-SA",
                "dateFormat": "ar-SA",
                "currency": "SAR",
            },
        })

        outcome = await context.translator.get_formatting_rules("arabic")

        assert outcome.ok
        assert outcome.value.direction == TextDirection.RTL
        assert outcome.value.currency == "SAR"

    @pytest.mark.asyncio
    async def test_defaults_on_failure(self, context, backend):
        outcome = await context.translator.get_formatting_rules("arabic")

        assert isinstance(outcome, Fallback)
        assert outcome.value.direction == TextDirection.LTR
        assert outcome.value.currency == "USD"
