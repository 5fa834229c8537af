"""Tests for the domain layer."""

from datetime import datetime, timedelta, timezone

import pytest

from pubstatus.domain import (
    TrackedProject,
    ProjectRecord,
    ProjectOutcome,
    BranchRef,
    ClassifiedBranch,
    PublishedVersionEntry,
    ReconciledVersion,
    classify_branches,
    reconcile_versions,
    normalize_version,
    is_sentinel_version,
    tag_versions_from_names,
)
from pubstatus.errors import RepositoryLookupError

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def published(*pairs):
    return [PublishedVersionEntry(version=v, published_url=p) for v, p in pairs]


class TestVersionNormalization:
    """Tests for version identifier normalization."""

    def test_strips_leading_v(self):
        assert normalize_version("v1.0.0") == "1.0.0"

    def test_plain_version_unchanged(self):
        assert normalize_version("1.0.0") == "1.0.0"

    def test_strips_only_one_v(self):
        assert normalize_version("vv2") == "v2"

    def test_uppercase_v_kept(self):
        assert normalize_version("V1.0") == "V1.0"

    @pytest.mark.parametrize("raw", ["current", "vcurrent", "CURRENT", "vCurrent", " current "])
    def test_sentinels(self, raw):
        assert is_sentinel_version(raw)

    def test_real_version_not_sentinel(self):
        assert not is_sentinel_version("1.0.0")
        assert not is_sentinel_version("current-2")

    def test_tag_versions_from_names(self):
        names = ["v1.0.0", "current", "v2.0.0", "vCurrent", "1.0.0", ""]
        assert tag_versions_from_names(names) == ["1.0.0", "2.0.0"]


class TestPublishedVersionEntry:
    """Tests for decoding manifest entries."""

    def test_from_manifest_entry(self):
        entry = PublishedVersionEntry.from_manifest_entry({"version": "v1.0.0", "path": "/p/1.0.0"})
        assert entry == PublishedVersionEntry(version="1.0.0", published_url="/p/1.0.0")

    def test_missing_version_is_dropped(self):
        assert PublishedVersionEntry.from_manifest_entry({"path": "/p"}) is None
        assert PublishedVersionEntry.from_manifest_entry({"version": "", "path": "/p"}) is None
        assert PublishedVersionEntry.from_manifest_entry({"version": 3, "path": "/p"}) is None

    def test_sentinel_is_dropped(self):
        assert PublishedVersionEntry.from_manifest_entry({"version": "vCurrent", "path": "/c"}) is None
        assert PublishedVersionEntry.from_manifest_entry({"version": "current", "path": "/c"}) is None

    def test_missing_path_is_unpublished(self):
        assert PublishedVersionEntry.from_manifest_entry({"version": "1.0"}).published_url is None
        assert PublishedVersionEntry.from_manifest_entry({"version": "1.0", "path": ""}).published_url is None
        assert PublishedVersionEntry.from_manifest_entry({"version": "1.0", "path": 7}).published_url is None


class TestReconcileVersions:
    """Tests for merging tag versions with published versions."""

    def test_tags_and_partial_manifest(self):
        tags = tag_versions_from_names(["v1.0.0", "v2.0.0"])
        entries = [PublishedVersionEntry.from_manifest_entry({"version": "v1.0.0", "path": "/p/1.0.0"})]

        result = reconcile_versions(tags, entries)

        assert result == [
            ReconciledVersion("1.0.0", has_tag=True, published_url="/p/1.0.0"),
            ReconciledVersion("2.0.0", has_tag=True, published_url=None),
        ]

    def test_no_manifest_means_all_unpublished(self):
        result = reconcile_versions(["1.0.0"], [])
        assert result == [ReconciledVersion("1.0.0", has_tag=True, published_url=None)]
        assert not result[0].is_published

    def test_manifest_only_version(self):
        entries = [
            e for e in (
                PublishedVersionEntry.from_manifest_entry({"version": "vCurrent", "path": "/cur"}),
                PublishedVersionEntry.from_manifest_entry({"version": "v3.0.0", "path": "/p/3"}),
            ) if e
        ]
        result = reconcile_versions([], entries)
        assert result == [ReconciledVersion("3.0.0", has_tag=False, published_url="/p/3")]

    def test_tag_versions_come_before_published_only(self):
        result = reconcile_versions(["2.0", "1.0"], published(("0.9", "/0.9"), ("1.0", "/1.0"), ("3.0", "/3.0")))
        assert [v.version for v in result] == ["2.0", "1.0", "0.9", "3.0"]

    def test_exactly_one_entry_per_identifier(self):
        tags = ["1.0", "1.0", "2.0"]
        entries = published(("1.0", "/a"), ("1.0", "/b"), ("3.0", "/c"), ("3.0", "/d"))

        result = reconcile_versions(tags, entries)

        versions = [v.version for v in result]
        assert sorted(versions) == ["1.0", "2.0", "3.0"]
        assert len(versions) == len(set(versions))

    def test_first_published_url_wins(self):
        result = reconcile_versions([], published(("1.0", "/first"), ("1.0", "/second")))
        assert result[0].published_url == "/first"

    def test_entry_without_path_is_listed_but_unpublished(self):
        entries = [PublishedVersionEntry.from_manifest_entry({"version": "v1.0"})]

        result = reconcile_versions(["1.0"], entries)

        assert result == [ReconciledVersion("1.0", has_tag=True, published_url=None)]
        assert not result[0].is_published

    def test_later_entry_with_path_fills_in_missing_path(self):
        result = reconcile_versions([], published(("1.0", None), ("1.0", "/later")))
        assert result == [ReconciledVersion("1.0", has_tag=False, published_url="/later")]

    def test_sentinels_never_in_output(self):
        result = reconcile_versions(["current", "1.0"], published(("vcurrent", "/x"), ("CURRENT", "/y")))
        assert [v.version for v in result] == ["1.0"]

    def test_empty_inputs(self):
        assert reconcile_versions([], []) == []

    def test_to_dict(self):
        d = ReconciledVersion("1.0", has_tag=False, published_url="/p").to_dict()
        assert d == {"version": "1.0", "has_tag": False, "published_url": "/p"}


class TestClassifyBranches:
    """Tests for branch freshness classification."""

    def branch(self, name, days=0, delta=None):
        return BranchRef(name=name, committed_at=NOW - (delta or timedelta(days=days)))

    def test_mixed_branches(self):
        branches = [
            self.branch("gh-pages", 500),
            self.branch("main", 10),
            self.branch("feature-x", 200),
        ]

        result = classify_branches(branches, "main", NOW)

        assert [b.name for b in result] == ["main", "feature-x"]
        main, feature = result
        assert main.is_default and not main.is_stale
        assert main.days_since_commit == 10
        assert not feature.is_default and feature.is_stale
        assert feature.days_since_commit == 200

    def test_threshold_is_exclusive(self):
        result = classify_branches(
            [self.branch("ninety", 90), self.branch("ninety-one", 91)], "main", NOW
        )
        assert not result[0].is_stale
        assert result[1].is_stale

    def test_days_are_floored(self):
        result = classify_branches(
            [self.branch("almost", delta=timedelta(days=90, hours=23, minutes=59))], "main", NOW
        )
        assert result[0].days_since_commit == 90
        assert not result[0].is_stale

    def test_default_branch_never_stale(self):
        result = classify_branches([self.branch("master", 1000)], "master", NOW)
        assert result[0].is_default
        assert not result[0].is_stale

    def test_future_commit_clamped_to_zero(self):
        result = classify_branches([self.branch("ahead", delta=timedelta(hours=-5))], "main", NOW)
        assert result[0].days_since_commit == 0

    def test_custom_threshold(self):
        result = classify_branches([self.branch("dev", 31)], "main", NOW, stale_after_days=30)
        assert result[0].is_stale

    def test_only_gh_pages(self):
        assert classify_branches([self.branch("gh-pages", 1)], "gh-pages", NOW) == []

    def test_to_dict(self):
        d = classify_branches([self.branch("main", 3)], "main", NOW)[0].to_dict()
        assert d["name"] == "main"
        assert d["days_since_commit"] == 3
        assert d["is_default"] is True
        assert d["is_stale"] is False
        assert d["committed_at"].startswith("2024-12-29")


class TestTrackedProject:
    """Tests for TrackedProject."""

    def test_from_dict(self):
        project = TrackedProject.from_dict({
            "name": "ANC", "repo": "WorldHealthOrganization/smart-anc",
            "published": "https://smart.who.int/anc",
        })
        assert project.name == "ANC"
        assert project.owner == "WorldHealthOrganization"
        assert project.repo_name == "smart-anc"
        assert project.published == "https://smart.who.int/anc"

    def test_from_dict_without_published(self):
        project = TrackedProject.from_dict({"name": "X", "repo": "o/r"})
        assert project.published is None

    def test_from_dict_requires_name_and_repo(self):
        with pytest.raises(ValueError):
            TrackedProject.from_dict({"name": "X"})
        with pytest.raises(ValueError):
            TrackedProject.from_dict({"repo": "o/r"})

    def test_ci_build_url(self):
        assert TrackedProject("X", "owner/repo").ci_build_url == "https://owner.github.io/repo/"

    def test_immutable(self):
        project = TrackedProject("X", "o/r")
        with pytest.raises(Exception):
            project.name = "Y"


class TestProjectRecord:
    """Tests for ProjectRecord and ProjectOutcome."""

    def make_record(self):
        return ProjectRecord(
            name="ANC",
            repo="o/anc",
            url="https://github.com/o/anc",
            default_branch="main",
            last_default_commit_at=NOW,
            branches=(
                ClassifiedBranch("main", NOW, 1, True, False),
                ClassifiedBranch("old", NOW, 120, False, True),
            ),
            versions=(
                ReconciledVersion("1.0", True, "/1.0"),
                ReconciledVersion("2.0", True, None),
                ReconciledVersion("0.9", False, "/0.9"),
            ),
        )

    def test_degraded_keeps_identity_only(self):
        record = ProjectRecord.degraded(TrackedProject("Alpha", "o/alpha", "https://x.github.io/a"), "boom")
        assert record.name == "Alpha"
        assert record.repo == "o/alpha"
        assert record.branches == ()
        assert record.versions == ()
        assert record.published_versions == ()
        assert record.url == ""
        assert record.last_default_commit_at is None
        assert record.is_degraded
        assert record.error == "boom"

    def test_healthy_record_is_not_degraded(self):
        assert not self.make_record().is_degraded

    def test_views(self):
        record = self.make_record()
        assert [b.name for b in record.stale_branches] == ["old"]
        assert [v.version for v in record.unpublished_versions] == ["2.0"]
        assert [v.version for v in record.untagged_versions] == ["0.9"]

    def test_visible_branches(self):
        record = self.make_record()
        assert [b.name for b in record.visible_branches()] == ["main"]
        assert [b.name for b in record.visible_branches(show_stale=True)] == ["main", "old"]

    def test_visible_versions(self):
        record = self.make_record()
        assert len(record.visible_versions()) == 3
        assert [v.version for v in record.visible_versions(show_unpublished=False)] == ["1.0", "0.9"]

    def test_to_dict(self):
        d = self.make_record().to_dict()
        assert d["name"] == "ANC"
        assert d["last_default_commit_at"] == NOW.isoformat()
        assert len(d["branches"]) == 2
        assert d["versions"][1] == {"version": "2.0", "has_tag": True, "published_url": None}
        assert "error" not in d

    def test_degraded_to_dict_has_error(self):
        d = ProjectRecord.degraded(TrackedProject("A", "o/a")).to_dict()
        assert d["error"] == "unavailable"
        assert d["branches"] == []
        assert d["last_default_commit_at"] is None

    def test_outcome_success(self):
        project = TrackedProject("ANC", "o/anc")
        record = self.make_record()
        outcome = ProjectOutcome.success(project, record)
        assert outcome.ok
        assert outcome.to_record() is record

    def test_outcome_failure(self):
        project = TrackedProject("Alpha", "o/alpha")
        outcome = ProjectOutcome.failure(project, RepositoryLookupError("o/alpha"))
        assert not outcome.ok
        record = outcome.to_record()
        assert record.name == "Alpha"
        assert record.is_degraded
        assert "o/alpha" in record.error
