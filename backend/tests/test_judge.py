import pytest

from ielts_app.judge import InvalidAnswer, judge, levenshtein, normalize, similarity


def test_normalize_strips_case_punctuation_and_spacing():
    assert normalize('  "Carry   OUT (an) investigation!" ') == "carry out an investigation"
    assert normalize("[well-known]; {yes}") == "well-known yes"


def test_levenshtein_classic_values():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("abc", "") == 3
    assert levenshtein("flaw", "lawn") == 2
    assert levenshtein("same", "same") == 0


def test_similarity_is_symmetric():
    pairs = [("contribution", "contirbution"), ("a", "a very long reference answer"), ("kitten", "sitting")]
    for a, b in pairs:
        assert similarity(a, b) == similarity(b, a)


def test_similarity_of_two_empty_strings_is_full():
    assert similarity("", "") == 100.0
    assert similarity("", "abc") == 0.0


def test_identity_is_correct_at_full_similarity():
    verdict = judge("sustainable development", "sustainable development")
    assert verdict.is_correct is True
    assert verdict.similarity == 100.0


def test_judge_is_deterministic():
    assert judge("contirbution", "contribution") == judge("contirbution", "contribution")


def test_case_whitespace_and_punctuation_are_ignored():
    verdict = judge("Contribute!", "  contribute ")
    assert verdict.is_correct is True
    assert verdict.similarity == 100.0
    assert verdict.normalized_user == "contribute"
    assert verdict.normalized_correct == "contribute"


def test_containment_accepts_close_superset():
    verdict = judge("the contribute", "contribute")
    # 10 / 14 clears the 0.6 ratio even though similarity alone would not
    assert verdict.is_correct is True
    assert verdict.similarity == 71.43


def test_containment_below_ratio_falls_through_to_similarity():
    verdict = judge("investigate", "investigate something")
    assert verdict.is_correct is False
    assert verdict.similarity == 52.38


def test_short_fragment_is_not_accepted_by_containment():
    verdict = judge("a", "a very long reference answer")
    assert verdict.is_correct is False
    assert verdict.similarity == 3.57


def test_transposition_typo_sits_just_below_threshold():
    verdict = judge("contirbution", "contribution")
    assert verdict.similarity == 83.33
    assert verdict.is_correct is False


def test_single_typo_in_longer_word_is_accepted():
    verdict = judge("enviroment", "environment")
    # one deletion over 11 characters
    assert verdict.similarity == 90.91
    assert verdict.is_correct is True


def test_threshold_is_inclusive_at_85():
    verdict = judge("abcdefghijklmnopqxyz", "abcdefghijklmnopqrst")
    assert verdict.similarity == 85.0
    assert verdict.is_correct is True


@pytest.mark.parametrize(
    "user, correct, expected_similarity",
    [
        ("abcdefghijklmnopwxyz", "abcdefghijklmnopqrst", 80.0),
        ("abcdex", "abcdef", 83.33),
    ],
)
def test_below_threshold_is_rejected(user, correct, expected_similarity):
    verdict = judge(user, correct)
    assert verdict.similarity == expected_similarity
    assert verdict.is_correct is False


def test_just_above_threshold_is_accepted():
    verdict = judge("abcdefx", "abcdefg")
    assert verdict.similarity == 85.71
    assert verdict.is_correct is True


@pytest.mark.parametrize("user, correct", [("", "answer"), ("answer", "   "), (None, "answer")])
def test_blank_inputs_are_rejected(user, correct):
    with pytest.raises(InvalidAnswer):
        judge(user, correct)


def test_punctuation_only_inputs_are_rejected():
    with pytest.raises(InvalidAnswer):
        judge("!!!", "???")
    with pytest.raises(InvalidAnswer):
        judge("...", "answer")
