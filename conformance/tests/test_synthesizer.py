"""
Mock Response Tests

Tests for:
- Kind matching for parameterized and parameterless queries
- Selector (preference) key matching
- Default responses
- Reporting answered queries
"""

import io

import pytest

from conformance.framework.commands import (
    QUERY_KINDS,
    QueryCategory,
    register_query_kind,
)
from conformance.framework.commands.shapes import BOOLEAN
from conformance.framework.context import RunContext
from conformance.framework.mocks import (
    MockResponder,
    synthesize,
    find_matching_record,
    default_response,
)
from conformance.framework.traces import MockResponseRecord, load_trace

from conftest import get_trace_path, query


def pref(key, value):
    return MockResponseRecord("getPreference", {"key": key, "value": value})


# =============================================================================
# Registry Tests
# =============================================================================

class TestRegistry:
    def test_every_kind_has_a_valid_default(self):
        """Defaults satisfy the kind's own response shape."""
        for spec in QUERY_KINDS.values():
            assert spec.response_shape(spec.default()), spec.kind

    def test_selector_kinds(self):
        selectors = sorted(k for k, s in QUERY_KINDS.items() if s.category is QueryCategory.SELECTOR)
        assert selectors == ["getPreference", "getSecure"]

    def test_selector_needs_key_extractor(self):
        with pytest.raises(ValueError):
            register_query_kind("getThing", QueryCategory.SELECTOR, BOOLEAN, bool)


# =============================================================================
# Matching Tests
# =============================================================================

class TestMatching:
    def test_parameterized_uses_first_record_of_kind(self):
        pool = [
            MockResponseRecord("addPlaylist", "first-id"),
            MockResponseRecord("addPlaylist", "second-id"),
        ]
        response = synthesize(query("addPlaylist", {"playlist_name": "x"}), pool)
        assert response == {"type": "addPlaylist", "data": "first-id"}

    def test_parameterless_ignores_other_kinds(self):
        pool = [MockResponseRecord("getTime", 12.5), MockResponseRecord("getVolume", 80.0)]
        assert synthesize(query("getVolume"), pool)["data"] == 80.0

    def test_selector_matches_qualified_key(self):
        """Query key 'theme' on pkg.foo selects the pkg.foo.theme record."""
        pool = [pref("pkg.foo.other", "nope"), pref("pkg.foo.theme", "dark")]
        response = synthesize(query("getPreference", {"key": "theme"}), pool, "pkg.foo")
        assert response == {"type": "getPreference", "data": {"key": "pkg.foo.theme", "value": "dark"}}

    def test_selector_never_picks_other_key(self):
        pool = [pref("pkg.foo.other", "nope")]
        record = find_matching_record(query("getPreference", {"key": "theme"}), pool, "pkg.foo")
        assert record is None

    def test_selector_does_not_cross_kinds(self):
        pool = [MockResponseRecord("getSecure", {"key": "pkg.foo.token", "value": "s"})]
        response = synthesize(query("getPreference", {"key": "token"}), pool, "pkg.foo")
        assert response["data"] == {"key": "", "value": None, "defaultValue": None}

    def test_selector_ties_resolve_in_document_order(self):
        pool = [pref("pkg.foo.theme", "dark"), pref("pkg.foo.theme", "light")]
        response = synthesize(query("getPreference", {"key": "theme"}), pool, "pkg.foo")
        assert response["data"]["value"] == "dark"

    def test_selector_key_uses_package_name(self):
        pool = [pref("pkg.bar.theme", "dark")]
        response = synthesize(query("getPreference", {"key": "theme"}), pool, "pkg.foo")
        assert response["data"]["key"] == ""

    def test_selector_without_key_field(self):
        """Query data that is not an object never matches a stored key."""
        pool = [pref("pkg.foo.None", "stale")]
        assert find_matching_record(query("getPreference", None), pool, "pkg.foo") is None
        response = synthesize(query("getPreference", "theme"), [pref("pkg.foo.theme", "dark")], "pkg.foo")
        assert response["data"]["key"] == ""

    def test_trace_pool(self):
        trace = load_trace(get_trace_path("smoke/accounts.yaml"))
        response = synthesize(query("getPreference", {"key": "theme"}), trace.mock_responses, "pkg.foo")
        assert response["data"]["value"] == "dark"
        assert synthesize(query("getAppVersion"), trace.mock_responses)["data"] == "10.3.2"


# =============================================================================
# Default Tests
# =============================================================================

class TestDefaults:
    @pytest.mark.parametrize("kind,default", [
        ("getSong", []),
        ("getVolume", 0.0),
        ("setPreference", False),
        ("getAppVersion", ""),
        ("getCurrentSong", None),
        ("getPlayerState", "STOPPED"),
        ("updateSong", {}),
    ])
    def test_empty_pool_gives_default(self, kind, default):
        assert synthesize(query(kind), []) == {"type": kind, "data": default}

    def test_defaults_are_fresh_objects(self):
        first = synthesize(query("getSong"), [])
        first["data"].append({"song": {}})
        assert synthesize(query("getSong"), [])["data"] == []

    def test_unknown_kind_answers_null(self):
        assert default_response(query("getWeather")) == {"type": "getWeather", "data": None}


# =============================================================================
# Responder Tests
# =============================================================================

class TestMockResponder:
    def test_reports_each_answer(self):
        out = io.StringIO()
        context = RunContext(stream=out, show_progress=False)
        responder = MockResponder([pref("pkg.foo.theme", "dark")], context)

        responder.answer_query("pkg.foo", query("getPreference", {"key": "theme"}))
        responder.answer_query("pkg.foo", query("getVolume"))

        lines = out.getvalue().splitlines()
        assert lines[0] == (
            "Responded to request getPreference with key 'pkg.foo.theme' "
            "with data for key 'pkg.foo.theme': \"dark\""
        )
        assert lines[1].startswith("Responded to request HostQuery[getVolume: null]")
        assert '"data": 0.0' in lines[1]

    def test_reporting_failure_does_not_break_answer(self):
        class BrokenContext:
            def report_query(self, request, response):
                raise OSError("terminal went away")

        responder = MockResponder([], BrokenContext())
        assert responder("pkg.foo", query("getVolume")) == {"type": "getVolume", "data": 0.0}

    def test_works_without_context(self):
        responder = MockResponder([MockResponseRecord("getTime", 3.0)])
        assert responder.answer_query("pkg.foo", query("getTime"))["data"] == 3.0
