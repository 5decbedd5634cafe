"""Tests for baseline year resolution."""

from unittest.mock import patch

import pytest

from git_calver.baseline import (
    find_oldest_root,
    parse_year,
    resolve_baseline,
    year_offset,
)
from git_calver.errors import InvalidYearError
from git_calver.repository import open_repository


class TestParseYear:
    """Test suite for parse_year()."""

    @pytest.mark.parametrize(
        "value,expected", [("2015", 2015), (" 2020 ", 2020), (2001, 2001), ("-5", -5)]
    )
    def test_valid_years(self, value, expected):
        assert parse_year(value) == expected

    @pytest.mark.parametrize("value", ["abc", "20x1", "2020.5", True])
    def test_invalid_years(self, value):
        with pytest.raises(InvalidYearError):
            parse_year(value)


class TestResolveBaseline:
    """Test suite for resolve_baseline()."""

    def test_explicit_year_wins(self, same_day_repo):
        with open_repository(same_day_repo.path) as repo:
            head = repo.head()
            assert resolve_baseline(repo, head, "2011") == 2011

    def test_invalid_explicit_year(self, same_day_repo):
        with open_repository(same_day_repo.path) as repo:
            head = repo.head()
            with pytest.raises(InvalidYearError):
                resolve_baseline(repo, head, "twenty")

    def test_derived_from_root_commit(self, make_repo):
        builder = make_repo()
        builder.commit("2017-12-31 23:00:00 +0000")
        builder.commit("2019-06-01 12:00:00 +0000")
        builder.commit("2021-02-03 12:00:00 +0000")

        with open_repository(builder.path) as repo:
            assert resolve_baseline(repo, repo.head()) == 2017

    def test_root_year_uses_utc(self, make_repo):
        builder = make_repo()
        # 2018-12-31 22:00 -0500 is 2019-01-01 03:00 UTC
        builder.commit("2018-12-31 22:00:00 -0500")

        with open_repository(builder.path) as repo:
            assert resolve_baseline(repo, repo.head()) == 2019

    def test_parentless_start_is_its_own_baseline(self, single_commit_repo):
        with open_repository(single_commit_repo.path) as repo:
            head = repo.head()
            assert head.is_root
            assert find_oldest_root(repo, head).hash == head.hash
            assert resolve_baseline(repo, head) == 2021

    def test_oldest_of_several_roots(self, make_repo):
        builder = make_repo()
        builder.commit("2019-06-01 12:00:00 +0000", "main root")
        builder.checkout("--orphan", "imported")
        old_root = builder.commit("2016-03-01 12:00:00 +0000", "imported root")
        builder.commit("2016-04-01 12:00:00 +0000", "imported work")
        builder.checkout("main")
        builder.merge("imported", "2020-01-01 12:00:00 +0000", unrelated=True)

        with open_repository(builder.path) as repo:
            head = repo.head()
            assert find_oldest_root(repo, head).hash == old_root
            assert resolve_baseline(repo, head) == 2016

    def test_roots_not_reachable_are_ignored(self, make_repo):
        builder = make_repo()
        builder.commit("2019-06-01 12:00:00 +0000", "main root")
        builder.checkout("--orphan", "elsewhere")
        builder.commit("2010-01-01 12:00:00 +0000", "unrelated root")
        builder.checkout("main")

        with open_repository(builder.path) as repo:
            assert resolve_baseline(repo, repo.head()) == 2019

    def test_baseline_cached_per_handle(self, same_day_repo):
        with open_repository(same_day_repo.path) as repo:
            head = repo.head()
            assert resolve_baseline(repo, head) == 2020

            with patch("git_calver.baseline.find_oldest_root") as mock_find:
                assert resolve_baseline(repo, head) == 2020
                mock_find.assert_not_called()

        # A fresh handle starts with an empty cache
        with open_repository(same_day_repo.path) as repo:
            assert repo.baseline_cache == {}

    def test_repeated_resolution_is_stable(self, same_day_repo):
        results = []
        for _ in range(2):
            with open_repository(same_day_repo.path) as repo:
                results.append(resolve_baseline(repo, repo.head()))
        assert results == [2020, 2020]


class TestYearOffset:
    """Test suite for year_offset()."""

    def test_offset_from_baseline(self, make_repo):
        builder = make_repo()
        builder.commit("2023-05-05 12:00:00 +0000")

        with open_repository(builder.path) as repo:
            head = repo.head()
            assert year_offset(head, 2020) == 3
            assert year_offset(head, 2023) == 0

    def test_offset_is_clamped(self, make_repo):
        builder = make_repo()
        builder.commit("2023-05-05 12:00:00 +0000")

        with open_repository(builder.path) as repo:
            assert year_offset(repo.head(), 2030) == 0
