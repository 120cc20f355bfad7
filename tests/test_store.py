import json

import pandas as pd
import pytest

from element_matcher.config.models import (
    ElementRecord,
    FieldName,
    MatchCategory,
    MatcherConfig,
    ReplacementRequest,
    StoreConfig,
)
from element_matcher.core.exceptions import CorpusUnavailableError, ElementMatcherError
from element_matcher.core.service import HealingService
from element_matcher.core.store import ElementStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_load_parses_corpus(corpus_file, app_corpus) -> None:
    store = ElementStore(StoreConfig(path=str(corpus_file)))
    assert store.load() == app_corpus


def test_load_caches_until_ttl_expires(corpus_file) -> None:
    clock = FakeClock()
    store = ElementStore(StoreConfig(path=str(corpus_file), cache_ttl_seconds=60), clock=clock)
    assert len(store.load()) == 3

    corpus_file.write_text(json.dumps({"test_elements": [{"element_id": "only"}]}))
    clock.now = 30
    assert len(store.load()) == 3

    clock.now = 61
    assert store.load() == [ElementRecord(element_id="only")]


def test_invalidate_forces_reload(corpus_file) -> None:
    store = ElementStore(StoreConfig(path=str(corpus_file)))
    store.load()
    corpus_file.write_text(json.dumps({"test_elements": []}))
    store.invalidate()
    assert store.load() == []


def test_load_failures_raise_corpus_unavailable(tmp_path) -> None:
    missing = ElementStore(StoreConfig(path=str(tmp_path / "missing.json")))
    with pytest.raises(CorpusUnavailableError):
        missing.load()

    malformed_path = tmp_path / "bad.json"
    malformed_path.write_text("{not json")
    with pytest.raises(ElementMatcherError):
        ElementStore(StoreConfig(path=str(malformed_path))).load()

    wrong_shape = tmp_path / "shape.json"
    wrong_shape.write_text(json.dumps({"elements": []}))
    with pytest.raises(CorpusUnavailableError):
        ElementStore(StoreConfig(path=str(wrong_shape))).load()


def test_replace_writes_through(corpus_file) -> None:
    store = ElementStore(StoreConfig(path=str(corpus_file)))
    new_record = ElementRecord(element_id="home_settings_button", accessibility_id="settingsButton")

    assert store.replace("home_settings_tab", new_record)
    assert store.load()[1] == new_record

    reloaded = ElementStore(StoreConfig(path=str(corpus_file))).load()
    assert reloaded[1] == new_record

    assert not store.replace("does_not_exist", new_record)
    assert store.apply(ReplacementRequest("home_settings_button", ElementRecord(element_id="x")))


def test_replace_swaps_file_atomically(corpus_file, monkeypatch) -> None:
    store = ElementStore(StoreConfig(path=str(corpus_file)))
    original = corpus_file.read_bytes()

    def failing_replace(src, dst) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("element_matcher.core.store.os.replace", failing_replace)
    with pytest.raises(OSError):
        store.replace("home_settings_tab", ElementRecord(element_id="home_settings_button"))

    assert corpus_file.read_bytes() == original
    assert list(corpus_file.parent.iterdir()) == [corpus_file]

    monkeypatch.undo()
    assert store.replace("home_settings_tab", ElementRecord(element_id="home_settings_button"))
    assert list(corpus_file.parent.iterdir()) == [corpus_file]
    assert json.loads(corpus_file.read_text())["test_elements"][1] == {
        "element_id": "home_settings_button"
    }


def test_statistics(corpus_file) -> None:
    corpus_file.write_text(json.dumps({"test_elements": [
        {"element_id": "a", "screen": "Login", "element_type": "button"},
        {"element_id": "b", "screen": "Login"},
        {"element_id": "c", "element_type": "button"},
    ]}))
    stats = ElementStore(StoreConfig(path=str(corpus_file))).statistics()

    assert stats["totalElements"] == 3
    assert stats["elementsByScreen"] == {"Login": 2, "Unknown": 1}
    assert stats["elementsByType"] == {"button": 2, "Unknown": 1}


def test_service_find_and_suggest(corpus_file, app_corpus) -> None:
    service = HealingService(ElementStore(StoreConfig(path=str(corpus_file))))

    exact = service.find(ElementRecord(element_id="home_settings_tab"))
    assert exact.category == MatchCategory.EXACT

    healed = service.find(ElementRecord(element_id="login_submit_butto", accessibility_id="loginButton"))
    assert healed.category == MatchCategory.SIMILARITY
    assert healed.auto_applied
    # the stale id is not stored, so the corpus is left as it was
    assert service.store.load() == app_corpus

    suggestions = service.suggest(ElementRecord(accessibility_id="loginButon"), limit=2)
    assert suggestions[0].record == app_corpus[0]
    assert len(suggestions) <= 2


def test_service_find_by_field_truncates(corpus_file) -> None:
    service = HealingService(
        ElementStore(StoreConfig(path=str(corpus_file))),
        config=MatcherConfig(max_suggestions=1),
    )
    results = service.find_by_field(ElementRecord(element_id="login_submit_butto"), FieldName.ELEMENT_ID)

    assert len(results) == 1
    assert results[0].record.element_id == "login_submit_button"
    assert results[0].category == MatchCategory.SIMILARITY
    assert service.find_by_field(ElementRecord(element_id="x"), FieldName.CLASS_NAME) == []


def test_service_update_validate_and_statistics(corpus_file) -> None:
    service = HealingService(ElementStore(StoreConfig(path=str(corpus_file))))

    assert service.update("profile_avatar_image", ElementRecord(element_id="profile_photo"))
    assert service.store.load()[2].element_id == "profile_photo"
    assert service.validate(ElementRecord(screen="x"))

    stats = service.statistics()
    assert stats["totalElements"] == 3
    assert stats["similarityThreshold"] == 0.75
    assert stats["autoUpdateEnabled"] is True
    assert stats["maxSuggestions"] == 5


def test_service_match_frame(corpus_file) -> None:
    service = HealingService(ElementStore(StoreConfig(path=str(corpus_file))))
    frame = pd.DataFrame([
        {"element_id": "profile_avatar_image", "accessibility_id": None},
        {"element_id": None, "accessibility_id": "settingsTab"},
    ])
    results = service.match_frame(frame)

    assert list(results["match_category"]) == ["EXACT", "SIMILARITY"]
    assert list(results["matched_element_id"]) == ["profile_avatar_image", "home_settings_tab"]
