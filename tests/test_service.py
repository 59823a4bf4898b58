import threading
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from chatranslator.core.models import TranslationRequest
from chatranslator.core.service import ChatTranslationService


@pytest.fixture
def config():
    return SimpleNamespace(
        enabled=True,
        source_language="auto",
        target_language="zh-CN",
        show_original=True,
        delay_ms=0,
    )


@pytest.fixture
def translator():
    return SimpleNamespace(translate=AsyncMock(return_value="你好"))


@pytest.fixture
def service(config, translator):
    sink = SimpleNamespace(deliver=AsyncMock())
    return ChatTranslationService(config, translator, sink, self_name="Dave")


def test_submit_queues_player_line(service):
    assert service.submit("<Bob> hello world", source="log")
    assert service.queue.pending() == [TranslationRequest("hello world", immediate=False, attempt=1)]
    assert service.registry.sender_of("hello world") == "Bob"


def test_submit_immediate_flag(service):
    assert service.submit("<Bob> hello", immediate=True)
    assert service.queue.pending()[0].immediate is True


def test_submit_ignores_filtered_lines(service):
    assert not service.submit("/help")
    assert not service.submit("<Carol> 你好")
    assert not service.submit("<Dave> my own line")
    assert len(service.queue) == 0
    assert len(service.registry) == 0


def test_submit_unattributed_line(service):
    assert service.submit("good morning")
    assert service.registry.is_admitted("good morning")
    assert service.registry.sender_of("good morning") is None


def test_duplicate_submissions_queue_once(service):
    assert service.submit("<Bob> hello", source="log")
    assert not service.submit("<Bob> hello", source="discord:1")
    assert len(service.queue) == 1


def test_disabled_config_makes_submit_a_no_op(service, config):
    config.enabled = False
    assert not service.submit("<Bob> hello")
    assert len(service.queue) == 0
    assert len(service.registry) == 0


def test_concurrent_submit_enqueues_once(service):
    barrier = threading.Barrier(8)

    def producer():
        barrier.wait()
        service.submit("<Bob> same line", source="thread")

    threads = [threading.Thread(target=producer) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(service.queue) == 1
    assert len(service.registry) == 1


def test_status(service):
    service.submit("<Bob> hello")
    assert service.status() == {"running": False, "queued": 1, "pending": 1, "in_flight": 0}


@pytest.mark.asyncio
async def test_translate_now_uses_configured_languages(service, translator, config):
    config.source_language = "en"
    config.target_language = "ja"
    assert await service.translate_now("hello") == "你好"
    translator.translate.assert_awaited_once_with("hello", "en", "ja")
    assert len(service.queue) == 0


@pytest.mark.asyncio
async def test_start_and_stop(service):
    service.start()
    assert service.status()["running"]
    await service.stop()
