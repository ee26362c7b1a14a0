"""Tests for the Pods transcoder (no I/O)."""
from datetime import date
from types import SimpleNamespace

import pytest

from moviesync.errors import TranscodeError
from moviesync.models.catalog import Actor, Experiment, Movie
from moviesync.pods.schema import ACTOR, EXPERIMENT, MOVIE
from moviesync.pods.transcoder import from_remote_format, merge_into, to_remote_format


def make_movie(**overrides) -> Movie:
    fields = dict(
        title="Samurai Cop",
        slug="samurai-cop",
        year="1991",
        release_date=date(1991, 1, 1),
        runtime=96,
        characters=["Joe Marshall", "Frank Washington"],
        actors=["Matt Hannon", "Robert Z'Dar"],
    )
    fields.update(overrides)
    return Movie(**fields)


# ─── Local → remote ───────────────────────────────────────────────────────────

class TestToRemoteFormat:
    def test_envelope(self):
        payload = to_remote_format(MOVIE, make_movie())
        assert payload["title"] == "Samurai Cop"
        assert payload["slug"] == "samurai-cop"
        assert payload["status"] == "publish"

    def test_meta_uses_remote_names(self):
        meta = to_remote_format(MOVIE, make_movie())["meta"]
        assert meta["movie_title"] == "Samurai Cop"
        assert meta["movie_year"] == "1991"
        assert meta["movie_runtime"] == 96

    def test_date_is_iso_string(self):
        meta = to_remote_format(MOVIE, make_movie())["meta"]
        assert meta["movie_release_date"] == "1991-01-01"

    def test_repeatable_and_pick_are_lists(self):
        meta = to_remote_format(MOVIE, make_movie())["meta"]
        assert meta["movie_characters"] == ["Joe Marshall", "Frank Washington"]
        assert meta["movie_actors"] == ["Matt Hannon", "Robert Z'Dar"]

    def test_empty_values_omitted(self):
        meta = to_remote_format(
            MOVIE, make_movie(overview="", tagline=None, genres=[])
        )["meta"]
        assert "movie_overview" not in meta
        assert "movie_tagline" not in meta
        assert "movie_genres" not in meta

    def test_no_slug_for_pods_without_slug_column(self):
        payload = to_remote_format(ACTOR, Actor(name="Matt Hannon"))
        assert "slug" not in payload
        assert payload["title"] == "Matt Hannon"

    def test_actor_twitter_uses_trailing_underscore(self):
        meta = to_remote_format(ACTOR, Actor(name="x", twitter_id="xhandle"))["meta"]
        assert meta["actor_twitter_id_"] == "xhandle"
        assert "actor_twitter_id" not in meta

    def test_runtime_string_coerced_to_int(self):
        entity = SimpleNamespace(title="X", runtime="108")
        assert to_remote_format(MOVIE, entity)["meta"]["movie_runtime"] == 108

    def test_runtime_not_numeric_raises(self):
        entity = SimpleNamespace(title="X", runtime="long")
        with pytest.raises(TranscodeError):
            to_remote_format(MOVIE, entity)

    def test_dict_in_scalar_field_raises(self):
        entity = SimpleNamespace(title="X", tagline={"a": 1})
        with pytest.raises(TranscodeError):
            to_remote_format(MOVIE, entity)

    def test_bad_date_raises(self):
        entity = SimpleNamespace(title="X", release_date="01/01/1991")
        with pytest.raises(TranscodeError):
            to_remote_format(MOVIE, entity)

    def test_no_title_no_envelope_title(self):
        payload = to_remote_format(EXPERIMENT, Experiment(notes="tbd"))
        assert "title" not in payload
        assert payload["meta"] == {"experiment_notes": "tbd"}


# ─── Remote → local ───────────────────────────────────────────────────────────

class TestFromRemoteFormat:
    def test_partial_returns_only_supplied_fields(self):
        fields = from_remote_format(MOVIE, {"meta": {"movie_year": "1991"}})
        assert fields == {"year": "1991"}

    def test_full_fills_every_column(self):
        fields = from_remote_format(MOVIE, {"meta": {"movie_year": "1991"}}, full=True)
        assert fields["year"] == "1991"
        assert fields["tagline"] is None
        assert fields["slug"] is None
        assert set(f.local_name for f in MOVIE.fields) <= set(fields)

    def test_single_element_list_unwrapped(self):
        fields = from_remote_format(MOVIE, {"meta": {"movie_year": ["1991"]}})
        assert fields["year"] == "1991"

    def test_multi_element_list_in_scalar_raises(self):
        with pytest.raises(TranscodeError):
            from_remote_format(MOVIE, {"meta": {"movie_year": ["1991", "1992"]}})

    def test_runtime_parsed_to_int(self):
        fields = from_remote_format(MOVIE, {"meta": {"movie_runtime": "96"}})
        assert fields["runtime"] == 96

    def test_date_parsed(self):
        fields = from_remote_format(
            MOVIE, {"meta": {"movie_release_date": "1991-01-01 00:00:00"}}
        )
        assert fields["release_date"] == date(1991, 1, 1)

    def test_zero_date_is_empty(self):
        fields = from_remote_format(
            ACTOR, {"meta": {"actor_birthday": "0000-00-00"}}, full=True
        )
        assert fields["birthday"] is None

    def test_empty_string_is_missing(self):
        assert from_remote_format(MOVIE, {"meta": {"movie_tagline": ""}}) == {}

    def test_pick_objects_decode_to_titles(self):
        payload = {
            "meta": {
                "movie_actors": [
                    {"ID": 900, "post_title": "Matt Hannon"},
                    {"ID": 901, "post_title": "Robert Z&#8217;Dar"},
                ]
            }
        }
        fields = from_remote_format(MOVIE, payload)
        assert fields["actors"] == ["Matt Hannon", "Robert Z’Dar"]

    def test_pick_ids_decode_to_strings(self):
        fields = from_remote_format(MOVIE, {"meta": {"movie_genres": [12, "13"]}})
        assert fields["genres"] == ["12", "13"]

    def test_pick_without_title_or_id_raises(self):
        with pytest.raises(TranscodeError):
            from_remote_format(MOVIE, {"meta": {"movie_actors": [{"foo": "bar"}]}})

    def test_repeatable_text_nested_raises(self):
        with pytest.raises(TranscodeError):
            from_remote_format(MOVIE, {"meta": {"movie_characters": [["a"]]}})

    def test_title_falls_back_to_rendered_post_title(self):
        payload = {"title": {"rendered": "Samurai Cop &amp; Friends"}, "meta": {}}
        fields = from_remote_format(MOVIE, payload)
        assert fields["title"] == "Samurai Cop & Friends"

    def test_meta_title_wins_over_post_title(self):
        payload = {
            "title": {"rendered": "Post Title"},
            "meta": {"movie_title": "Meta Title"},
        }
        assert from_remote_format(MOVIE, payload)["title"] == "Meta Title"

    def test_slug_read_from_envelope(self):
        fields = from_remote_format(MOVIE, {"slug": "samurai-cop", "meta": {}})
        assert fields["slug"] == "samurai-cop"

    def test_missing_meta_is_ok(self):
        assert from_remote_format(ACTOR, {"id": 5}) == {}

    def test_payload_not_object_raises(self):
        with pytest.raises(TranscodeError):
            from_remote_format(MOVIE, ["not", "an", "object"])

    def test_meta_not_object_raises(self):
        with pytest.raises(TranscodeError):
            from_remote_format(MOVIE, {"meta": "oops"})


class TestRoundTrip:
    def test_push_then_pull_preserves_values(self):
        movie = make_movie(overview="Katana gang.", genres=["Action"])
        payload = to_remote_format(MOVIE, movie)
        fields = from_remote_format(MOVIE, payload)

        assert fields["title"] == movie.title
        assert fields["slug"] == movie.slug
        assert fields["year"] == movie.year
        assert fields["release_date"] == movie.release_date
        assert fields["runtime"] == movie.runtime
        assert fields["overview"] == movie.overview
        assert fields["characters"] == movie.characters
        assert fields["actors"] == movie.actors
        assert fields["genres"] == movie.genres

    def test_encoding_is_idempotent(self):
        movie = make_movie()
        first = to_remote_format(MOVIE, movie)
        again = to_remote_format(MOVIE, merge_into(make_movie(), from_remote_format(MOVIE, first)))
        assert first == again


class TestMergeInto:
    def test_only_given_fields_change(self):
        movie = make_movie(overview="keep me")
        merge_into(movie, {"year": "1992"})
        assert movie.year == "1992"
        assert movie.overview == "keep me"
