import datetime as dt
from pathlib import Path

import pytest

from postpress.errors import NotFoundError, ParseError
from postpress.sources.markdown_dir import load_posts, parse_front_matter, parse_post, slugify


def test_load_posts_reads_front_matter_and_skips_non_posts(posts_dir):
    posts = load_posts(posts_dir)

    assert [p.slug for p in posts] == ["async-patterns", "correlation-ids"]
    first = posts[0]
    assert first.title == "Async patterns in practice"
    assert first.date == dt.date(2016, 10, 13)
    assert first.tags == ("python", "async")
    assert first.body.startswith("Async code is easier")
    assert first.source == posts_dir / "2016-10-13-async-patterns.md"
    assert posts[1].summary == "Why every log line needs a request id."


def test_post_is_immutable(posts_dir):
    post = load_posts(posts_dir)[0]
    with pytest.raises(AttributeError):
        post.title = "changed"


def test_missing_directory_raises_not_found(tmp_path):
    with pytest.raises(NotFoundError) as err:
        load_posts(tmp_path / "nope")
    assert "nope" in str(err.value)


def test_file_instead_of_directory_raises_not_found(tmp_path):
    f = tmp_path / "file.md"
    f.write_text("x", encoding="utf-8")
    with pytest.raises(NotFoundError):
        load_posts(f)


def test_empty_directory_yields_no_posts(tmp_path):
    assert load_posts(tmp_path) == []


def test_missing_date_names_the_file(tmp_path, write_post):
    path = write_post(tmp_path, "no-date.md", title="Undated")
    with pytest.raises(ParseError) as err:
        load_posts(tmp_path)
    assert err.value.path == path
    assert "date" in str(err.value)
    assert str(path) in str(err.value)


def test_missing_title_raises(tmp_path, write_post):
    write_post(tmp_path, "untitled.md", date="2020-01-01")
    with pytest.raises(ParseError, match="title"):
        load_posts(tmp_path)


def test_missing_front_matter_block_raises(tmp_path):
    (tmp_path / "plain.md").write_text("# Just markdown\n", encoding="utf-8")
    with pytest.raises(ParseError, match="front-matter"):
        load_posts(tmp_path)


def test_unterminated_front_matter_raises(tmp_path):
    (tmp_path / "open.md").write_text("---\ntitle: x\ndate: 2020-01-01\n", encoding="utf-8")
    with pytest.raises(ParseError, match="unterminated"):
        load_posts(tmp_path)


def test_unparseable_date_raises(tmp_path, write_post):
    write_post(tmp_path, "bad.md", title="Bad", date="someday soon")
    with pytest.raises(ParseError, match="date"):
        load_posts(tmp_path)


def test_string_and_datetime_dates_are_accepted(tmp_path, write_post):
    write_post(tmp_path, "a.md", title="A", date='"January 31, 2017"')
    write_post(tmp_path, "b.md", title="B", date="2016-10-13 09:30:00")
    posts = {p.slug: p for p in load_posts(tmp_path)}
    assert posts["a"].date == dt.date(2017, 1, 31)
    assert posts["b"].date == dt.date(2016, 10, 13)


def test_explicit_slug_and_normalisation(tmp_path, write_post):
    write_post(tmp_path, "Some File_Name.markdown", title="T", date="2020-01-01")
    write_post(tmp_path, "other.md", title="T2", date="2020-01-01", slug='"Custom Slug!"')
    assert sorted(p.slug for p in load_posts(tmp_path)) == ["custom-slug", "some-file-name"]


def test_duplicate_slugs_raise(tmp_path, write_post):
    write_post(tmp_path, "2020-01-01-same.md", title="A", date="2020-01-01")
    write_post(tmp_path, "2020-02-02-same.md", title="B", date="2020-02-02")
    with pytest.raises(ParseError, match="duplicate slug"):
        load_posts(tmp_path)


def test_reserved_slug_raises(tmp_path, write_post):
    write_post(tmp_path, "index.md", title="Home", date="2020-01-01")
    with pytest.raises(ParseError, match="reserved"):
        load_posts(tmp_path)


def test_drafts_are_skipped_unless_requested(tmp_path, write_post):
    write_post(tmp_path, "wip.md", title="WIP", date="2020-01-01", draft="true")
    write_post(tmp_path, "done.md", title="Done", date="2020-01-01")
    assert [p.slug for p in load_posts(tmp_path)] == ["done"]
    assert [p.slug for p in load_posts(tmp_path, include_drafts=True)] == ["done", "wip"]


def test_comma_separated_tags(tmp_path, write_post):
    path = write_post(tmp_path, "t.md", title="T", date="2020-01-01", tags="a, b ,, c")
    assert parse_post(path).tags == ("a", "b", "c")


def test_parse_front_matter_splits_body():
    meta, body = parse_front_matter("\ufeff---\ntitle: Hi\ndate: 2020-01-01\n---\n\nBody text\n")
    assert meta == {"title": "Hi", "date": dt.date(2020, 1, 1)}
    assert body == "Body text"


def test_parse_front_matter_rejects_non_mapping():
    with pytest.raises(ParseError, match="mapping"):
        parse_front_matter("---\n- a\n- b\n---\nbody")


def test_slugify():
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("--a__b--") == "a-b"
    assert slugify("!!!") == ""


def test_impossible_calendar_date_raises_parse_error(tmp_path, write_post):
    path = write_post(tmp_path, "bad-month.md", title="Bad", date="2017-13-45")
    with pytest.raises(ParseError) as err:
        load_posts(tmp_path)
    assert err.value.path == path


def test_partial_dates_do_not_depend_on_today(tmp_path, write_post):
    write_post(tmp_path, "year.md", title="Y", date="'2017'")
    write_post(tmp_path, "month.md", title="M", date='"March 2017"')
    posts = {p.slug: p for p in load_posts(tmp_path)}
    assert posts["year"].date == dt.date(2017, 1, 1)
    assert posts["month"].date == dt.date(2017, 3, 1)


def test_quoted_false_draft_is_not_a_draft(tmp_path, write_post):
    write_post(tmp_path, "kept.md", title="Kept", date="2020-01-01", draft='"no"')
    assert [p.slug for p in load_posts(tmp_path)] == ["kept"]
