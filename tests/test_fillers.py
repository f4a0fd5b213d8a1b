from src.analysis.fillers import (
    count_fillers,
    filler_spans,
    filler_words,
    highlight_fillers,
    is_filler_token,
    total_fillers,
)
from src.analysis.types import Word


def test_count_fillers_sample_sentence():
    counts = count_fillers("um so basically I think uh this is great")
    assert counts["um"] == 1
    assert counts["so"] == 1
    assert counts["basically"] == 1
    assert counts["uh"] == 1
    assert total_fillers(counts) == 4


def test_count_fillers_multi_word_and_case():
    counts = count_fillers("You know, I mean, it's like... LIKE whatever.")
    assert counts["you know"] == 1
    assert counts["i mean"] == 1
    assert counts["like"] == 2


def test_count_fillers_whole_words_only():
    counts = count_fillers("An umbrella is unlike a sofa; alike, actually.")
    assert counts["um"] == 0
    assert counts["like"] == 0
    assert counts["so"] == 0
    assert counts["actually"] == 1


def test_count_fillers_empty():
    assert total_fillers(count_fillers("")) == 0


def test_is_filler_token():
    assert is_filler_token("Um,")
    assert is_filler_token("LITERALLY!")
    assert not is_filler_token("think")
    assert is_filler_token("think", flagged=True)


def test_filler_words_marks_and_normalizes():
    words = [
        Word("Um,", 0.0, 0.2, 0.9),
        Word("hello", 0.2, 0.6, 0.9),
        Word("hmm", 0.6, 0.9, 0.5, filler=True),
    ]
    fillers = filler_words(words)
    assert [w.word for w in fillers] == ["um", "hmm"]
    assert all(w.filler is True for w in fillers)
    assert fillers[0].start == 0.0


def test_filler_spans_prefer_longest_term():
    spans = filler_spans("you know what happened")
    assert [term for *_, term in spans] == ["you know"]


def test_highlight_fillers():
    assert highlight_fillers("Um I think, you know, it works") == "[Um] I think, [you know], it works"
    assert highlight_fillers("clean sentence") == "clean sentence"
    assert highlight_fillers("so", fmt=str.upper) == "SO"
