import pytest

from pkglicenses.core.templates import TEMPLATE_FILES, CorpusLoadError, load_templates, parse_template


def test_bundled_corpus_loads_in_order(corpus):
    assert len(corpus) == len(TEMPLATE_FILES) == 23
    assert [t.name for t in corpus] == list(TEMPLATE_FILES)
    assert all(t.title for t in corpus)
    assert all(t.words for t in corpus)


def test_mit_template_fields(corpus):
    mit = next(t for t in corpus if t.name == "mit.txt")

    assert mit.title == "MIT License"
    assert mit.nickname == ""
    # The placeholder copyright line is not part of the word set.
    assert "fullname" not in mit.words
    assert "permission" in mit.words


def test_nickname_is_read_from_front_matter(corpus):
    bsd2 = next(t for t in corpus if t.name == "bsd_2_clause.txt")

    assert bsd2.nickname == "Simplified BSD License"


def test_parse_template_ignores_preamble_and_unknown_keys():
    content = "generated, do not edit\n---\ntitle: Foo License\nspdx-id: FOO\n---\n\nFoo bar foo\n"

    template = parse_template(content, "foo.txt")

    assert template.title == "Foo License"
    assert template.name == "foo.txt"
    assert dict(template.words) == {"foo": 0, "bar": 1}


def test_template_words_are_read_only():
    template = parse_template("---\ntitle: X\n---\nword\n")

    with pytest.raises(TypeError):
        template.words["other"] = 3  # type: ignore[index]


@pytest.mark.parametrize(
    "content",
    [
        "no front matter at all",
        "---\ntitle: Unclosed\nbody text\n",
    ],
)
def test_parse_template_rejects_malformed_documents(content):
    with pytest.raises(CorpusLoadError):
        parse_template(content, "bad.txt")


def test_load_templates_fails_on_missing_asset():
    with pytest.raises(CorpusLoadError):
        load_templates(["mit.txt", "does_not_exist.txt"])
