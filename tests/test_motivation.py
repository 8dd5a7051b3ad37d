import pytest
import requests

from lantern.core.cache_helper import CacheHelper
from lantern.core.errors import FetchFailure
from lantern.core.store import MOTIVATION_CACHE_KEY
from lantern.plugins.motivation import motivation_base
from lantern.plugins.motivation.models import DEFAULT_QUOTE
from lantern.plugins.motivation.motivation_base import MotivationBackend
from lantern.plugins.motivation.service import MotivationService

from .conftest import FakeMotivationBackend


def serve(monkeypatch, responses):
    def fake_get(url, timeout=None):
        body = responses[url]
        if isinstance(body, Exception):
            raise body
        response = requests.Response()
        response.status_code = 200
        response._content = body.encode()
        return response

    monkeypatch.setattr(motivation_base.requests, "get", fake_get)


def test_quote_accepts_plain_and_message_results(monkeypatch) -> None:
    backend = MotivationBackend({"quote_url": "https://q.test/a"})

    serve(monkeypatch, {"https://q.test/a": '{"result": "Jangan putus asa"}'})
    assert backend.fetch_quote() == "Jangan putus asa"

    serve(monkeypatch, {"https://q.test/a": '{"result": {"message": "Tetap istiqomah"}}'})
    assert backend.fetch_quote() == "Tetap istiqomah"


def test_excerpt_reads_original_and_translation(monkeypatch) -> None:
    backend = MotivationBackend({"excerpt_url": "https://q.test/b"})
    serve(monkeypatch, {"https://q.test/b": '{"result": {"arab": "صبر", "arti": "Sabar"}}'})

    assert backend.fetch_excerpt() == ("صبر", "Sabar")


def test_bad_payloads_are_fetch_failures(monkeypatch) -> None:
    backend = MotivationBackend({"quote_url": "https://q.test/a", "excerpt_url": "https://q.test/b"})
    serve(monkeypatch, {
        "https://q.test/a": "not json",
        "https://q.test/b": requests.Timeout("slow"),
    })

    with pytest.raises(FetchFailure):
        backend.fetch_quote()
    with pytest.raises(FetchFailure):
        backend.fetch_excerpt()


def test_content_cached_for_the_day(store, clock) -> None:
    backend = FakeMotivationBackend()
    service = MotivationService(backend, CacheHelper(store, MOTIVATION_CACHE_KEY, clock))

    first = service.get_today()
    second = service.get_today()

    assert first == second
    assert first.quote == "Sabar itu indah"
    assert first.excerpt_translation.startswith("Sesungguhnya")
    assert backend.quote_calls == 1


def test_failure_uses_default_and_is_not_cached(store, clock) -> None:
    backend = FakeMotivationBackend(fail=True)
    service = MotivationService(backend, CacheHelper(store, MOTIVATION_CACHE_KEY, clock))

    content = service.get_today()

    assert content.quote == DEFAULT_QUOTE
    assert content.excerpt_original == ""
    assert store.get(MOTIVATION_CACHE_KEY) is None
