"""
Unit tests for pageload_analyzer.filters.scope_resolver module.
"""
import pytest

from conftest import OTHER_URL, PAGE_URL
from pageload_analyzer.core.errors import ScopeError
from pageload_analyzer.core.types import AnalysisConfig, Occurrence
from pageload_analyzer.filters import DUPLICATED_BOOKKEEPING_NAMES, ScopeResolver


def occ(name, start, nav=None, frame=None, url=None, category=''):
    return Occurrence(
        name=name, category=category, start=start,
        navigation_id=nav, frame_id=frame, url=url,
    )


@pytest.fixture
def navigation_trace():
    return [
        occ("navigationStart", 0, nav="NAV1"),
        occ("navigationStart", 10, nav="NAV1", frame="F1", url=PAGE_URL),
        occ("fetchStart", 20, nav="NAV1"),
        occ("ParseHTML", 30, frame="F1"),
        occ("ParseHTML", 35, frame="F2"),
        occ("GPUTask", 40, category="gpu"),
        occ("navigationStart", 50, nav="NAV2", frame="F2", url=OTHER_URL),
    ]


class TestResolveByNavigation:

    def test_keeps_navigation_and_frame_matches(self, navigation_trace):
        resolver = ScopeResolver(AnalysisConfig())
        scoped = resolver.resolve_by_navigation(navigation_trace, PAGE_URL)

        assert [(o.name, o.start) for o in scoped] == [
            ("navigationStart", 10),
            ("fetchStart", 20),
            ("ParseHTML", 30),
        ]

    def test_url_agnostic_categories_are_kept(self, navigation_trace):
        resolver = ScopeResolver(AnalysisConfig(url_agnostic_categories=["gpu"]))
        scoped = resolver.resolve_by_navigation(navigation_trace, PAGE_URL)

        assert "GPUTask" in [o.name for o in scoped]

    def test_only_first_duplicate_is_dropped(self):
        trace = [
            occ("domComplete", 0, nav="NAV1"),
            occ("navigationStart", 1, nav="NAV1", frame="F1", url=PAGE_URL),
            occ("domComplete", 2, nav="NAV1"),
            occ("domComplete", 3, nav="NAV1"),
        ]
        scoped = ScopeResolver(AnalysisConfig()).resolve_by_navigation(trace, PAGE_URL)

        # navigationStart occurs once, so that single occurrence is the dropped one.
        assert [(o.name, o.start) for o in scoped] == [("domComplete", 2), ("domComplete", 3)]

    def test_no_anchor_is_an_error(self, navigation_trace):
        with pytest.raises(ScopeError):
            ScopeResolver(AnalysisConfig()).resolve_by_navigation(navigation_trace, "https://nowhere/")

    def test_anchor_without_ids_is_an_error(self):
        trace = [occ("navigationStart", 0, nav="NAV1", url=PAGE_URL)]
        with pytest.raises(ScopeError):
            ScopeResolver(AnalysisConfig()).resolve_by_navigation(trace, PAGE_URL)

    def test_bookkeeping_names(self):
        assert "navigationStart" in DUPLICATED_BOOKKEEPING_NAMES
        assert "fetchStart" not in DUPLICATED_BOOKKEEPING_NAMES


class TestResolveByUrl:

    @pytest.fixture
    def url_trace(self):
        return [
            occ("ScriptParseHTML", 0, url=PAGE_URL, category="ScriptParseHTML"),
            occ("ScriptEvaluate", 1, url=OTHER_URL, category="ScriptEvaluate"),
            occ("Compositing", 2, category="Compositing"),
            occ("LayoutPerform", 3, category="LayoutPerform"),
        ]

    def test_keeps_matching_and_exempt(self, url_trace):
        scoped = ScopeResolver.resolve_by_url(url_trace, PAGE_URL, frozenset({"Compositing"}))
        assert [o.name for o in scoped] == ["ScriptParseHTML", "Compositing"]

    def test_no_match_is_an_error(self, url_trace):
        with pytest.raises(ScopeError):
            ScopeResolver.resolve_by_url(url_trace, "https://nowhere/", frozenset({"Compositing"}))

    def test_without_required_match_keeps_url_less(self, url_trace):
        scoped = ScopeResolver.resolve_by_url(
            url_trace, "https://nowhere/", frozenset({"Compositing"}), require_match=False
        )
        assert [o.name for o in scoped] == ["Compositing", "LayoutPerform"]
