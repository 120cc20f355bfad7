import json

import pytest

from element_matcher.config.models import ElementRecord
from element_matcher.core.matcher import ElementMatcher


@pytest.fixture
def login_corpus() -> list:
    return [ElementRecord(element_id="login_submit_button", accessibility_id="loginButton")]


@pytest.fixture
def app_corpus() -> list:
    return [
        ElementRecord(
            element_id="login_submit_button",
            locator="//XCUIElementTypeButton[@name='loginButton']",
            accessibility_id="loginButton",
            name="Login",
            screen="LoginScreen",
            element_type="button",
        ),
        ElementRecord(
            element_id="home_settings_tab",
            accessibility_id="settingsTab",
            name="Settings",
            screen="HomeScreen",
            element_type="tab",
        ),
        ElementRecord(
            element_id="profile_avatar_image",
            accessibility_id="avatarImage",
            class_name="XCUIElementTypeImage",
            screen="ProfileScreen",
            element_type="image",
        ),
    ]


@pytest.fixture
def matcher() -> ElementMatcher:
    return ElementMatcher(worker_threads=2)


@pytest.fixture
def corpus_file(tmp_path, app_corpus):
    path = tmp_path / "elements.json"
    path.write_text(json.dumps({"test_elements": [r.to_dict() for r in app_corpus]}))
    return path
