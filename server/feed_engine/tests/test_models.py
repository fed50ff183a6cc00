"""
Tests for feed_engine.models

Covers: Source (de)serialization, post normalization, derived ids.
"""
from feed_engine.models import Post, Source, SourceType, derive_post_id, normalize_post


# ── Source ────────────────────────────────────────────────────────────────────

class TestSource:
    def test_from_dict_keeps_unknown_keys(self):
        source = Source.from_dict(
            {
                "id": "boys",
                "url": "/sources/boys/games.json",
                "type": "category",
                "tag": "boys",
                "visible": True,
                "name": "Boys",
                "icon": "kart.png",
            }
        )
        assert source.extra == {"name": "Boys", "icon": "kart.png"}
        assert source.to_dict()["name"] == "Boys"

    def test_missing_type_is_category(self):
        assert Source.from_dict({"id": "x", "url": "/sources/x/games.json"}).type is SourceType.CATEGORY

    def test_unknown_type_is_category(self):
        assert SourceType.from_string("podcast") is SourceType.CATEGORY
        assert SourceType.from_string(" External ") is SourceType.EXTERNAL

    def test_visible_requires_literal_true(self):
        assert Source.from_dict({"id": "a", "url": "u", "visible": "yes"}).visible is False
        assert Source.from_dict({"id": "a", "url": "u"}).visible is False
        assert Source.from_dict({"id": "a", "url": "u", "visible": True}).visible is True

    def test_numeric_tag_becomes_string(self):
        assert Source.from_dict({"id": "a", "url": "u", "tag": 7}).tag == "7"

    def test_key_falls_back_to_url(self):
        assert Source(id=None, url="https://a.example/feed.json").key == "https://a.example/feed.json"
        assert Source(id="a", url="https://a.example/feed.json").key == "a"

    def test_container_flag_round_trips(self):
        d = {"id": "langs", "url": "/sources/langs/games.json", "isContainer": True}
        assert Source.from_dict(d).to_dict()["isContainer"] is True
        assert "isContainer" not in Source(id="a", url="u").to_dict()


# ── Post normalization ────────────────────────────────────────────────────────

class TestNormalizePost:
    def test_non_object_is_rejected(self):
        assert normalize_post("hello") is None
        assert normalize_post(None) is None
        assert normalize_post([1, 2]) is None

    def test_date_field_precedence(self):
        post = normalize_post(
            {"id": "a", "date": "2026-01-01", "publishedAt": "2026-02-02", "createdAt": "2026-03-03"}
        )
        assert post.date == "2026-02-02"
        assert post.date_field == "publishedAt"

    def test_falls_through_empty_date_fields(self):
        post = normalize_post({"id": "a", "publishedAt": "", "pubDate": "Thu, 24 Jul 2025 17:06:15 GMT"})
        assert post.date_field == "pubDate"

    def test_inherits_tag_and_type_when_absent(self):
        post = normalize_post({"id": "a"}, tag="boys", default_type="microgame")
        assert post.tag == "boys"
        assert post.type == "microgame"

    def test_own_tag_and_type_win(self):
        post = normalize_post({"id": "a", "tag": "kart", "type": "article"}, tag="boys", default_type="microgame")
        assert post.tag == "kart"
        assert post.type == "article"

    def test_non_string_tag_and_type_fall_back(self):
        post = normalize_post({"id": "a", "tag": 7, "type": ["game"]}, tag="boys", default_type="microgame")
        assert post.tag == "boys"
        assert post.type == "microgame"

    def test_non_string_type_without_default_is_none(self):
        post = normalize_post({"id": "a", "type": {"kind": "essay"}, "tag": ["x"]})
        assert post.type is None
        assert post.tag is None

    def test_reactions_keep_only_non_empty_strings(self):
        post = normalize_post({"id": "a", "reactions": ["one", "", 3, None, "two"]})
        assert post.reactions == ("one", "two")

    def test_numeric_id_becomes_string(self):
        assert normalize_post({"id": 42}).id == "42"

    def test_to_dict_restores_source_date_field(self):
        raw = {
            "id": "a",
            "title": "T",
            "essence": "E",
            "reactions": ["r"],
            "source": "s",
            "pubDate": "Thu, 24 Jul 2025 17:06:15 GMT",
            "backgroundColor": "purple",
        }
        assert normalize_post(raw).to_dict() == raw

    def test_to_dict_leaves_out_ranking_fields(self):
        post = normalize_post({"id": "a"})
        post.weight = 5
        post.timestamp = 123
        d = post.to_dict()
        assert "weight" not in d and "timestamp" not in d


# ── Derived ids ───────────────────────────────────────────────────────────────

class TestDerivePostId:
    def test_origin_title_date(self):
        post = normalize_post(
            {"title": "Hello", "source": "https://a.example/feed.json", "publishedAt": "2026-10-01T00:00:00Z"}
        )
        assert derive_post_id(post) == "https://a.example/feed.json|Hello|2026-10-01T00:00:00Z"

    def test_url_used_when_source_missing(self):
        post = normalize_post({"title": "Hello", "url": "https://a.example/p/1"})
        assert derive_post_id(post) == "https://a.example/p/1|Hello|"

    def test_deterministic(self):
        raw = {"title": "Hello", "source": "s", "date": "d"}
        assert derive_post_id(normalize_post(raw)) == derive_post_id(normalize_post(raw))

    def test_truncated(self):
        post = Post(id=None, title="x" * 400, source="s")
        assert len(derive_post_id(post)) == 256

    def test_nothing_to_derive_from(self):
        assert derive_post_id(normalize_post({"essence": "only text"})) is None
