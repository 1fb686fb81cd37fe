from __future__ import annotations

import pytest

from socialfeed.feed.domain import models, policies
from socialfeed.feed.domain.exceptions import InvalidModeError, ValidationError


@pytest.mark.parametrize("raw, expected", [("python", "python"), ("#python", "python"), (" #Go_lang ", "Go_lang")])
def test_normalise_hashtag(raw, expected):
    assert policies.normalise_hashtag(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "#", "##tag", "a-b", "a b"])
def test_normalise_hashtag_rejects(raw):
    with pytest.raises(ValidationError):
        policies.normalise_hashtag(raw)


def test_following_mode_needs_viewer():
    with pytest.raises(InvalidModeError) as excinfo:
        policies.require_viewer(models.FollowingMode(subject_username=""), None)
    assert excinfo.value.status_code == 401


def test_other_modes_allow_anonymous():
    policies.require_viewer(models.GlobalMode(), None)
    policies.require_viewer(models.HashtagMode(tag="x"), None)


def test_page_size_bounds(monkeypatch):
    from socialfeed.settings import settings

    monkeypatch.setattr(settings, "feed_max_page_size", 20)
    assert policies.ensure_page_size(1) == 1
    assert policies.ensure_page_size(20) == 20
    with pytest.raises(ValidationError):
        policies.ensure_page_size(21)
    with pytest.raises(ValidationError):
        policies.ensure_page_size(0)


def test_offset_must_not_be_negative():
    assert policies.ensure_offset(0) == 0
    with pytest.raises(ValidationError):
        policies.ensure_offset(-5)
