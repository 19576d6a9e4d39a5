"""
Tests for the cached quick launcher facade.
"""
import pytest

from quicklaunch.core.config import LauncherSettings, RankingSettings
from quicklaunch.core.schemas import PageMetadata, Visit
from quicklaunch.search.quick_launcher import QuickLauncher, build_visits_from_records


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class CountingLoader:
    """Loader returning fresh copies of the fixtures and counting calls."""

    def __init__(self, registry, visits):
        self.registry = registry
        self.visits = visits
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return dict(self.registry), self.visits


@pytest.fixture
def clock(sample_now):
    return FakeClock(sample_now)


@pytest.fixture
def loader(sample_registry, sample_visits):
    return CountingLoader(sample_registry, sample_visits)


@pytest.fixture
def launcher(loader, clock):
    return QuickLauncher(
        loader,
        settings=LauncherSettings(cache_ttl=60, max_results=10),
        ranking=RankingSettings(use_bloom=True),
        clock=clock
    )


class TestSearch:

    def test_single_result(self, launcher):
        results = launcher.search("git")
        assert len(results) == 1
        assert results[0].page_id == "p1"
        assert results[0].title == "GitHub Pull Requests"
        assert results[0].url == "github.com/pr"
        assert results[0].score == 1.0

    def test_relative_scores(self, loader, launcher):
        loader.registry["p2"] = PageMetadata(title="Git Docs", url="docs.google.com")
        results = launcher.search("git")

        assert [r.page_id for r in results] == ["p2", "p1"]
        assert [r.score for r in results] == [1.0, 0.5]
        assert results[0].to_dict()["title"] == "Git Docs"

    def test_limit(self, loader, launcher):
        loader.registry["p2"] = PageMetadata(title="Git Docs", url="docs.google.com")
        assert len(launcher.search("git", limit=1)) == 1

    def test_zero_limit_returns_nothing(self, launcher):
        assert launcher.search("git", limit=0) == []

    def test_default_limit_from_settings(self, loader, clock):
        loader.registry.update({f"g{i}": PageMetadata(title=f"Git {i}") for i in range(4)})
        for page_id in loader.registry:
            loader.visits.ensure(page_id).visits.append(Visit(1_000_000))
        launcher = QuickLauncher(loader, settings=LauncherSettings(max_results=3), clock=clock)
        assert len(launcher.search("git")) == 3

    def test_empty_query(self, launcher):
        assert launcher.search("") == []

    def test_loader_failure_returns_empty(self, clock):
        def broken():
            raise OSError("history database locked")

        launcher = QuickLauncher(broken, clock=clock)
        assert launcher.search("git") == []
        assert launcher.engine is None


class TestCache:

    def test_engine_reused_within_ttl(self, launcher, loader, clock):
        launcher.search("git")
        engine = launcher.engine
        clock.now += 30
        launcher.search("goo")

        assert loader.calls == 1
        assert launcher.engine is engine

    def test_engine_rebuilt_after_ttl(self, launcher, loader, clock):
        launcher.search("git")
        clock.now += 61
        launcher.search("git")
        assert loader.calls == 2

    def test_invalidate(self, launcher, loader):
        launcher.search("git")
        launcher.invalidate()
        assert launcher.engine is None
        launcher.search("git")
        assert loader.calls == 2


class TestFeedback:

    def test_click_before_search_is_ignored(self, launcher):
        assert launcher.record_click("p1") is None

    def test_click_after_search(self, launcher, sample_visits):
        launcher.search("git")
        assert launcher.record_click("p1") == pytest.approx(0.55)
        assert len(sample_visits.get("p1")) == 3

    def test_impressions_skip_clicked(self, launcher, sample_visits):
        launcher.search("git")
        launcher.record_impressions(["p1", "p2"], clicked="p1")

        assert sample_visits.get("p1").personal_score == 0.5
        assert sample_visits.get("p2").personal_score == pytest.approx(0.45)


class TestBuildVisits:

    def test_groups_rows_by_page(self):
        store = build_visits_from_records([
            {"page_id": "p1", "start_time": 1_700_000_000_000, "end_time": 1_700_000_045_000},
            {"page_id": "p1", "start_time": 1_700_000_100, "total_active_time": 12.4},
            {"page_id": "p2", "start_time": 1_700_000_200},
            {"page_id": None, "start_time": 1_700_000_300},
        ])

        assert len(store) == 2
        p1 = store.get("p1")
        assert p1.timestamps == [1_700_000_000, 1_700_000_100]
        assert p1.dwell_times == [45, 12]
        assert store.get("p2").dwell_times == [0]
        assert p1.personal_score == 0.5
