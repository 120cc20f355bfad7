"""Longest common subsequence and character-frequency similarity."""

from typing import List, Optional

ALPHABET_SIZE = 256


def _lcs_table(s1: str, s2: str) -> List[List[int]]:
    dp = [[0] * (len(s2) + 1) for _ in range(len(s1) + 1)]
    for i in range(1, len(s1) + 1):
        for j in range(1, len(s2) + 1):
            if s1[i - 1] == s2[j - 1]:
                dp[i][j] = dp[i - 1][j - 1] + 1
            else:
                dp[i][j] = max(dp[i - 1][j], dp[i][j - 1])
    return dp


def lcs_length(s1: Optional[str], s2: Optional[str]) -> int:
    """Length of the longest common subsequence; 0 if either side is None."""
    if s1 is None or s2 is None:
        return 0
    return _lcs_table(s1, s2)[len(s1)][len(s2)]


def longest_common_subsequence(s1: Optional[str], s2: Optional[str]) -> str:
    """Return one longest common subsequence of the two strings."""
    if s1 is None or s2 is None:
        return ''

    dp = _lcs_table(s1, s2)
    chars = []
    i, j = len(s1), len(s2)
    while i > 0 and j > 0:
        if s1[i - 1] == s2[j - 1]:
            chars.append(s1[i - 1])
            i -= 1
            j -= 1
        elif dp[i - 1][j] > dp[i][j - 1]:
            i -= 1
        else:
            j -= 1
    return ''.join(reversed(chars))


def similarity(s1: Optional[str], s2: Optional[str]) -> float:
    """Return LCS length / longer length, in [0, 1]."""
    if s1 is None and s2 is None:
        return 1.0
    if s1 is None or s2 is None:
        return 0.0

    max_length = max(len(s1), len(s2))
    if max_length == 0:
        return 1.0
    return lcs_length(s1, s2) / max_length


def normalized_similarity(s1: Optional[str], s2: Optional[str]) -> float:
    """Case-insensitive, whitespace-trimmed LCS similarity."""
    if s1 is None and s2 is None:
        return 1.0
    if s1 is None or s2 is None:
        return 0.0
    return similarity(s1.lower().strip(), s2.lower().strip())


def _frequencies(text: str) -> List[int]:
    freq = [0] * ALPHABET_SIZE
    for char in text:
        freq[ord(char) % ALPHABET_SIZE] += 1
    return freq


def frequency_similarity(s1: str, s2: str) -> float:
    """
    Compare character histograms over the byte alphabet.

    Code points above 255 are folded into the alphabet modulo its size.

    Returns:
        float: sum of per-character minimums over sum of maximums
    """
    if not s1 and not s2:
        return 1.0

    freq1 = _frequencies(s1)
    freq2 = _frequencies(s2)
    common = sum(min(a, b) for a, b in zip(freq1, freq2))
    total = sum(max(a, b) for a, b in zip(freq1, freq2))
    return common / total if total else 1.0


def blended_similarity(s1: Optional[str], s2: Optional[str]) -> float:
    """LCS similarity with a minor character-frequency term."""
    if s1 is None and s2 is None:
        return 1.0
    if s1 is None or s2 is None:
        return 0.0
    return 0.7 * similarity(s1, s2) + 0.3 * frequency_similarity(s1, s2)
