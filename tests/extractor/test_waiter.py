"""Tests for waiting on dynamically added fields."""
from __future__ import annotations

import threading
import time

import pytest

from formscan.extractor.errors import FieldTimeoutError
from formscan.extractor.forms import FieldExtractor
from formscan.extractor.tree import HtmlDocument


@pytest.fixture
def document() -> HtmlDocument:
    return HtmlDocument('<form id="apply"><input id="name"></form>')


def add_later(document: HtmlDocument, delay: float, html: str) -> threading.Timer:
    timer = threading.Timer(delay, document.append_html, args=("#apply", html))
    timer.start()
    return timer


class TestWaitForIdentifier:
    def test_returns_immediately_when_present(self, document: HtmlDocument) -> None:
        node = document.wait_for_identifier("name", timeout=0.1)
        assert node.get_attribute("id") == "name"
        assert document.observer_count == 0

    def test_times_out_after_deadline(self, document: HtmlDocument) -> None:
        start = time.monotonic()
        with pytest.raises(FieldTimeoutError) as exc_info:
            document.wait_for_identifier("never", timeout=0.1)
        elapsed = time.monotonic() - start

        assert 0.09 <= elapsed < 1.0
        assert exc_info.value.identifier == "never"
        assert "never" in str(exc_info.value)

    def test_timeout_is_a_timeout_error(self, document: HtmlDocument) -> None:
        with pytest.raises(TimeoutError):
            document.wait_for_identifier("never", timeout=0.05)

    def test_observer_removed_after_timeout(self, document: HtmlDocument) -> None:
        with pytest.raises(FieldTimeoutError):
            document.wait_for_identifier("never", timeout=0.1)
        assert document.observer_count == 0

        calls: list[int] = []
        unsubscribe = document.observe(lambda: calls.append(1))
        unsubscribe()
        document.append_html("#apply", '<input id="never">')
        assert calls == []
        assert document.observer_count == 0

    def test_waits_for_field_added_later(self, document: HtmlDocument) -> None:
        timer = add_later(document, 0.05, '<input id="late">')
        try:
            node = document.wait_for_identifier("late", timeout=2.0)
        finally:
            timer.cancel()
        assert node.get_attribute("id") == "late"
        assert document.observer_count == 0

    def test_unrelated_changes_keep_waiting(self, document: HtmlDocument) -> None:
        timer = add_later(document, 0.02, '<input id="other">')
        try:
            with pytest.raises(FieldTimeoutError):
                document.wait_for_identifier("late", timeout=0.15)
        finally:
            timer.cancel()
        assert document.observer_count == 0


class TestExtractWithWait:
    def test_extract_waits_then_scans(self, document: HtmlDocument) -> None:
        timer = add_later(document, 0.05, '<input id="late">')
        try:
            fields = FieldExtractor().extract(document, wait_for="late", timeout=2.0)
        finally:
            timer.cancel()
        assert [f.identifier for f in fields] == ["name", "late"]

    def test_extract_propagates_timeout(self, document: HtmlDocument) -> None:
        with pytest.raises(FieldTimeoutError):
            FieldExtractor().extract(document, wait_for="missing", timeout=0.1)
        assert document.observer_count == 0


class TestConcurrentMutation:
    def test_lookup_blocks_until_mutation_finishes(self, document: HtmlDocument) -> None:
        results: list[object] = []
        reader = threading.Thread(target=lambda: results.append(document.find_by_id("late")))

        def change(soup) -> None:
            form = soup.find(id="apply")
            reader.start()
            reader.join(0.1)
            assert reader.is_alive()
            form.append(soup.new_tag("input", id="late"))

        document.mutate(change)
        reader.join(1.0)
        assert results[0].get_attribute("id") == "late"

    def test_concurrent_appends_all_land(self, document: HtmlDocument) -> None:
        threads = [
            threading.Thread(
                target=document.append_html, args=("#apply", f'<input id="f{i}">')
            )
            for i in range(20)
        ]
        waiter_result: list[object] = []
        waiter = threading.Thread(
            target=lambda: waiter_result.append(document.wait_for_identifier("f19", 2.0))
        )
        waiter.start()
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        waiter.join()

        assert waiter_result[0].get_attribute("id") == "f19"
        assert len(document.query_selector_all("#apply input")) == 21
        assert document.observer_count == 0
