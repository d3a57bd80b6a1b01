# tests/test_models.py
"""Tests for vidshare domain models."""

from datetime import timezone

import pytest
from pydantic import ValidationError

from vidshare.models import Owner, User, Video, VideoDraft, VideoListing, parse_tags


class TestParseTags:
    def test_trims_and_drops_empty(self):
        assert parse_tags(" cats,  funny ,, ,pets ") == ["cats", "funny", "pets"]

    def test_deduplicates_preserving_order(self):
        assert parse_tags("b, a, b, c, a") == ["b", "a", "c"]

    @pytest.mark.parametrize("raw", [None, "", " , ,"])
    def test_empty(self, raw):
        assert parse_tags(raw) == []


class TestVideo:
    def _video(self, **overrides):
        fields = dict(
            title="Test",
            storage_id="link_1",
            video_url="https://example.com/v.mp4",
            thumbnail_url="https://example.com/t.jpg",
            owner_id="u1",
        )
        fields.update(overrides)
        return Video(**fields)

    def test_defaults(self):
        video = self._video()
        assert video.views == 0
        assert video.duration == 0.0
        assert video.likes == []
        assert video.tags == []
        assert video.is_private is False
        assert len(video.video_id) == 24
        assert video.created_at.tzinfo == timezone.utc

    def test_title_required(self):
        with pytest.raises(ValidationError):
            self._video(title="")

    def test_title_max_length(self):
        self._video(title="x" * 200)
        with pytest.raises(ValidationError):
            self._video(title="x" * 201)

    def test_description_max_length(self):
        with pytest.raises(ValidationError):
            self._video(description="x" * 2001)

    def test_likes_count(self):
        assert self._video(likes=["a", "b"]).likes_count == 2

    def test_touch_refreshes_updated_at(self):
        video = self._video()
        before = video.updated_at
        video.touch()
        assert video.updated_at >= before

    def test_json_uses_camel_case(self):
        data = self._video(likes=["a"]).model_dump(mode="json", by_alias=True)
        assert data["id"]
        assert data["videoUrl"] == "https://example.com/v.mp4"
        assert data["thumbnailUrl"] == "https://example.com/t.jpg"
        assert data["isPrivate"] is False
        assert data["likesCount"] == 1
        assert "createdAt" in data and "updatedAt" in data

    def test_accepts_camel_case_input(self):
        video = Video.model_validate({
            "title": "T",
            "storageId": "s",
            "videoUrl": "https://example.com/v.mp4",
            "thumbnailUrl": "https://example.com/t.jpg",
            "ownerId": "u1",
        })
        assert video.video_url == "https://example.com/v.mp4"


class TestUser:
    def test_token_not_serialized(self):
        user = User(username="alice")
        assert user.api_token
        assert "api_token" not in user.model_dump()
        assert "apiToken" not in user.model_dump(by_alias=True)

    def test_owner_projection(self):
        user = User(username="alice", avatar="a.png", bio="hi", videos=["v1"])
        owner = Owner.from_user(user)
        assert owner.model_dump(by_alias=True) == {
            "id": user.user_id, "username": "alice", "avatar": "a.png", "bio": "hi",
        }


class TestVideoListing:
    def test_uploader_expanded(self, sample_video, alice):
        listing = VideoListing(
            **sample_video.model_dump(exclude={"likes_count"}),
            uploader=Owner.from_user(alice),
        )
        data = listing.model_dump(mode="json", by_alias=True)
        assert data["uploader"]["username"] == "alice"
        assert data["id"] == sample_video.video_id


class TestVideoDraft:
    def test_strips_whitespace(self):
        draft = VideoDraft(title="  Hello  ", description=" d ", tags="a, b")
        assert draft.title == "Hello"
        assert draft.description == "d"
        assert draft.tag_list == ["a", "b"]

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            VideoDraft(title="   ")
