"""Tests for sprintboard.chat.matching module."""

import pytest

from sprintboard.chat.matching import (
    AMBIGUOUS,
    FOUND,
    NOT_FOUND,
    describe_item,
    matches_criteria,
    resolve_story,
)
from sprintboard.lib.types import UserStory


@pytest.fixture
def stories():
    return [
        UserStory(id="s1", title="Login", priority="Alta", story_points=5, status="pending"),
        UserStory(id="s2", title="Checkout Flow", priority="Media", story_points=8, status="pending"),
        UserStory(id="s3", title="Checkout Review", priority="Alta", story_points=3, status="done"),
    ]


class TestMatchesCriteria:
    def test_title_is_case_insensitive_substring(self, stories):
        assert matches_criteria(stories[1], {"title": "checkout"})
        assert not matches_criteria(stories[0], {"title": "checkout"})

    def test_criteria_are_anded(self, stories):
        assert matches_criteria(stories[2], {"title": "Checkout", "priority": "Alta"})
        assert not matches_criteria(stories[1], {"title": "Checkout", "priority": "Alta"})

    def test_story_points_compare_numerically(self, stories):
        assert matches_criteria(stories[1], {"storyPoints": 8})
        assert matches_criteria(stories[1], {"storyPoints": "8"})
        assert not matches_criteria(stories[1], {"storyPoints": 5})

    def test_status_exact(self, stories):
        assert matches_criteria(stories[2], {"status": "done"})
        assert not matches_criteria(stories[2], {"status": "Done"})


class TestResolveStory:
    def test_single_match(self, stories):
        resolution = resolve_story({"title": "login"}, stories)
        assert resolution.outcome == FOUND
        assert resolution.story_id == "s1"
        assert resolution.title == "Login"

    def test_ambiguous(self, stories):
        resolution = resolve_story({"title": "Checkout"}, stories)
        assert resolution.outcome == AMBIGUOUS
        assert resolution.matches == ["s2", "s3"]
        assert not resolution.ok

    def test_criteria_narrow_ambiguity(self, stories):
        resolution = resolve_story({"title": "Checkout", "storyPoints": 3}, stories)
        assert resolution.outcome == FOUND
        assert resolution.story_id == "s3"

    def test_not_found(self, stories):
        assert resolve_story({"title": "Payments"}, stories).outcome == NOT_FOUND

    def test_empty_item_matches_nothing(self, stories):
        assert resolve_story({}, stories).outcome == NOT_FOUND
        assert resolve_story({"title": ""}, stories).outcome == NOT_FOUND

    def test_direct_id(self, stories):
        resolution = resolve_story({"id": "s2"}, stories)
        assert resolution.outcome == FOUND
        assert resolution.title == "Checkout Flow"

    def test_numeric_id_not_in_snapshot(self, stories):
        resolution = resolve_story({"id": 99}, stories)
        assert resolution.outcome == FOUND
        assert resolution.story_id == "99"

    def test_deterministic(self, stories):
        item = {"title": "Checkout"}
        first = resolve_story(item, stories)
        for _ in range(5):
            again = resolve_story(item, stories)
            assert again.outcome == first.outcome
            assert again.matches == first.matches


class TestDescribeItem:
    def test_by_id(self):
        assert describe_item({"id": 5}) == "id 5"

    def test_by_criteria(self):
        assert describe_item({"title": "Checkout", "priority": "Alta"}) == '"Checkout", priority=Alta'

    def test_nothing(self):
        assert describe_item({}) == "(no criteria)"
