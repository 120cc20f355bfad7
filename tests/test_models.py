import pytest

from element_matcher.config.models import (
    ElementRecord,
    FieldMatchConfig,
    FieldName,
    MatchCategory,
    MatchOutcome,
    MatcherConfig,
    StoreConfig,
)


def test_record_from_dict_ignores_unknown_keys() -> None:
    record = ElementRecord.from_dict({
        "element_id": "login_submit_button",
        "xpath": "//XCUIElementTypeButton[@name='login']",
        "accessibility_id": "loginButton",
        "color": "blue",
        "name": None,
    })
    assert record.element_id == "login_submit_button"
    assert record.locator == "//XCUIElementTypeButton[@name='login']"
    assert record.name is None


def test_record_accepts_locator_alias() -> None:
    assert ElementRecord.from_dict({"locator": "//a"}).locator == "//a"


def test_record_to_dict_omits_absent_fields() -> None:
    record = ElementRecord(element_id="a", locator="//b")
    assert record.to_dict() == {"element_id": "a", "xpath": "//b"}


def test_record_presence() -> None:
    record = ElementRecord(name="  ", screen="Login")
    assert not record.has(FieldName.NAME)
    assert record.has(FieldName.SCREEN)
    assert record.has("screen")
    assert record.present_fields() == [FieldName.SCREEN]


def test_outcome_constructors_hold_invariants() -> None:
    query = ElementRecord(element_id="a")
    exact = MatchOutcome.exact(query, query)
    assert exact.category == MatchCategory.EXACT
    assert exact.score == 1.0
    assert exact.is_matched

    missing = MatchOutcome.not_found(query, "nothing")
    assert missing.score == 0.0
    assert missing.matched is None
    assert not missing.is_matched


def test_matcher_config_defaults_and_validation() -> None:
    config = MatcherConfig()
    assert config.similarity_threshold == 0.75
    assert config.auto_update_enabled is True
    assert config.max_suggestions == 5

    with pytest.raises(ValueError):
        MatcherConfig(similarity_threshold=1.5)
    with pytest.raises(ValueError):
        MatcherConfig(max_suggestions=0)


def test_matcher_config_from_dict() -> None:
    config = MatcherConfig.from_dict({"similarity_threshold": "0.8", "max_suggestions": 3})
    assert config.similarity_threshold == 0.8
    assert config.max_suggestions == 3
    assert config.auto_update_enabled is True
    assert MatcherConfig.from_dict({"auto_update_enabled": "false"}).auto_update_enabled is False


def test_other_configs_validate() -> None:
    with pytest.raises(ValueError):
        StoreConfig(path="elements.json", cache_ttl_seconds=-1)
    with pytest.raises(ValueError):
        FieldMatchConfig(FieldName.NAME, weight=-0.1)
    with pytest.raises(ValueError):
        FieldMatchConfig(FieldName.NAME, weight=0.1, match_method="phonetic")
