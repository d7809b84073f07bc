from ielts_app.highlight import Segment, find_segments, segments_for_items


def test_longest_phrase_wins_and_matches_never_overlap():
    text = "Let's touch base next week. Basically the base plan works."
    segments = find_segments(text, ["base", "touch base"])

    assert "".join(s.text for s in segments) == text
    assert [(s.text, s.label) for s in segments if s.label] == [
        ("touch base", "touch base"),
        ("base", "base"),
    ]


def test_single_words_respect_word_boundaries():
    segments = find_segments("Basically, base.", ["base"])
    assert segments == [Segment("Basically, "), Segment("base", "base"), Segment(".")]


def test_matching_is_case_insensitive_and_keeps_original_text():
    segments = find_segments("Carbon Footprint matters", ["carbon footprint"])
    assert segments[0] == Segment("Carbon Footprint", "carbon footprint")
    assert segments[1] == Segment(" matters")


def test_phrases_match_inside_longer_text():
    segments = find_segments("We need to carry out an investigation.", ["carry out"])
    assert [s.label for s in segments] == [None, "carry out", None]


def test_regex_characters_in_phrases_are_literal():
    segments = find_segments("Costs rose (sharply) in 2020.", ["(sharply)"])
    assert Segment("(sharply)", "(sharply)") in segments


def test_no_phrases_or_no_text():
    assert find_segments("plain text", []) == [Segment("plain text")]
    assert find_segments("", ["anything"]) == []


def test_segments_for_items_reads_english_field_from_several_groups():
    vocabulary = [{"english": "renewable energy", "vietnamese": "năng lượng tái tạo"}]
    structures = [{"english": "not only", "vietnamese": "không chỉ"}, "ignored"]
    segments = segments_for_items("Not only is renewable energy cheap.", vocabulary, structures)

    assert segments == [
        {"text": "Not only", "label": "not only"},
        {"text": " is ", "label": None},
        {"text": "renewable energy", "label": "renewable energy"},
        {"text": " cheap.", "label": None},
    ]


def test_segments_for_items_tolerates_missing_groups():
    assert segments_for_items("Hello", None, []) == [{"text": "Hello", "label": None}]
