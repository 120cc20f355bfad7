import pytest

from element_matcher.core import edit_distance, subsequence


@pytest.mark.parametrize("text", ["", "a", "login_submit_button", "XCUIElementTypeButton"])
def test_distance_to_self_is_zero(text: str) -> None:
    assert edit_distance.distance(text, text) == 0
    assert edit_distance.similarity(text, text) == 1.0


@pytest.mark.parametrize(
    "s1, s2",
    [("kitten", "sitting"), ("loginButton", "homeScreen"), ("", "abc"), ("flaw", "lawn")],
)
def test_distance_is_symmetric(s1: str, s2: str) -> None:
    assert edit_distance.distance(s1, s2) == edit_distance.distance(s2, s1)
    assert subsequence.lcs_length(s1, s2) == subsequence.lcs_length(s2, s1)


def test_distance_known_values() -> None:
    assert edit_distance.distance("kitten", "sitting") == 3
    assert edit_distance.distance("login_submit_button", "login_submit_butto") == 1


def test_distance_handles_missing_sides() -> None:
    assert edit_distance.distance(None, None) == 0
    assert edit_distance.distance(None, "abcd") == 4
    assert edit_distance.distance("abc", None) == 3


def test_similarity_bounds_and_none() -> None:
    assert edit_distance.similarity("", "") == 1.0
    assert edit_distance.similarity(None, None) == 1.0
    assert edit_distance.similarity("abc", None) == 0.0
    assert edit_distance.similarity("abc", "xyz") == 0.0
    assert 0.0 <= edit_distance.similarity("loginButton", "homeScreen") <= 1.0
    assert edit_distance.similarity("abcd", "abce") == pytest.approx(0.75)


def test_normalized_similarity_ignores_case_and_padding() -> None:
    assert edit_distance.normalized_similarity("  LoginButton ", "loginbutton") == 1.0
    assert subsequence.normalized_similarity("ABC", " abc") == 1.0


def test_lcs_length_bounded_by_shorter() -> None:
    assert subsequence.lcs_length("ABCBDAB", "BDCABA") == 4
    assert subsequence.lcs_length("abc", "abcdef") <= 3
    assert subsequence.lcs_length(None, "abc") == 0


def test_longest_common_subsequence_is_common() -> None:
    lcs = subsequence.longest_common_subsequence("ABCBDAB", "BDCABA")
    assert len(lcs) == 4
    for text in ("ABCBDAB", "BDCABA"):
        it = iter(text)
        assert all(char in it for char in lcs)


def test_lcs_similarity() -> None:
    assert subsequence.similarity("", "") == 1.0
    assert subsequence.similarity("abc", None) == 0.0
    assert subsequence.similarity("abcd", "abxd") == pytest.approx(0.75)


def test_frequency_similarity() -> None:
    assert subsequence.frequency_similarity("", "") == 1.0
    assert subsequence.frequency_similarity("aab", "abb") == pytest.approx(0.5)
    assert subsequence.frequency_similarity("abc", "cba") == 1.0


def test_blended_similarity() -> None:
    assert subsequence.blended_similarity("abc", "abc") == pytest.approx(1.0)
    # anagrams share every character but only part of the order
    assert subsequence.blended_similarity("abc", "cba") == pytest.approx(0.7 / 3 + 0.3)
