import pytest

from pkglicenses.core.locate import DirectoryReadError
from pkglicenses.core.normalize import normalize
from pkglicenses.core.records import NO_MATCH, Template
from pkglicenses.core.scoring import MatchCache, dice_score, match_templates, match_words


def test_exact_mit_text_scores_one(corpus, mit_text):
    result = match_templates(mit_text, corpus)

    assert result.template is not None
    assert result.template.title == "MIT License"
    assert result.score == 1.0
    assert result.extra_words == ()
    assert result.missing_words == ()


def test_extra_clause_lowers_score_and_lists_extras(corpus, mit_text):
    text = mit_text + "\nAdditional terms apply to zebras.\n"

    result = match_templates(text, corpus)

    assert result.template.title == "MIT License"
    assert 0.9 < result.score < 1.0
    assert result.extra_words == ("additional", "terms", "apply", "zebras")
    assert result.missing_words == ()


def test_truncated_text_lists_missing_words_in_template_order(corpus, mit_text):
    mit = next(t for t in corpus if t.name == "mit.txt")
    text = mit_text.split("THE SOFTWARE IS PROVIDED")[0]

    result = match_words(normalize(text), [mit])

    assert result.template is mit
    assert result.score < 1.0
    assert result.extra_words == ()
    missing = result.missing_words
    assert missing[:3] == ("provided", "as", "warranty")
    positions = [result.template.words[w] for w in missing]
    assert positions == sorted(positions)


def test_scores_stay_in_unit_interval(corpus):
    for text in ("", "completely unrelated prose", "GNU General Public License"):
        result = match_templates(text, corpus)
        assert 0.0 <= result.score <= 1.0


def test_matching_is_deterministic(corpus, mit_text):
    first = match_templates(mit_text + " zebra", corpus)
    second = match_templates(mit_text + " zebra", corpus)

    assert first == second


def test_exact_ties_go_to_first_template():
    first = Template("First", words=normalize("foo bar"))
    second = Template("Second", words=normalize("bar foo"))

    result = match_words(normalize("foo bar baz"), [first, second])

    assert result.template is first
    assert result.score == pytest.approx(0.8)


def test_empty_corpus_yields_no_match():
    assert match_templates("anything", []) is NO_MATCH


def test_empty_candidate_reports_first_template_with_zero_score(corpus):
    result = match_templates("", corpus)

    assert result.template is corpus[0]
    assert result.score == 0.0


def test_empty_template_against_empty_candidate_is_skipped():
    empty = Template("Empty")
    other = Template("Other", words=normalize("foo"))

    assert dice_score({}, {}) is None
    assert match_words({}, [empty]) is NO_MATCH
    result = match_words({}, [empty, other])
    assert result.template is other
    assert result.score == 0.0


def test_match_cache_reads_each_file_once(corpus, mit_text):
    calls = []

    def reader(path):
        calls.append(path)
        return mit_text

    cache = MatchCache(corpus, reader=reader)

    a = cache.match_file("/x/LICENSE")
    b = cache.match_file("/x/LICENSE")
    cache.match_file("/y/LICENSE")

    assert a is b
    assert calls == ["/x/LICENSE", "/y/LICENSE"]
    assert cache.hits == 1
    assert len(cache) == 2
    assert "/x/LICENSE" in cache


def test_match_cache_wraps_read_errors(tmp_path, corpus):
    cache = MatchCache(corpus)

    with pytest.raises(DirectoryReadError) as excinfo:
        cache.match_file(str(tmp_path / "missing" / "LICENSE"))

    assert excinfo.value.path.endswith("LICENSE")


def test_vocabulary_delta_is_disjoint_and_complete(corpus, mit_text):
    text = mit_text.replace("merge, publish", "fork") + "\nzebras welcome\n"
    words = normalize(text)

    result = match_words(words, corpus)

    extra = set(result.extra_words)
    missing = set(result.missing_words)
    assert not extra & missing
    common = {w for w in words if w in result.template.words}
    assert common | extra == set(words)
    assert "fork" in extra and "merge" in missing
