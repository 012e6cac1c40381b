import json

import pytest
import requests

from ingest import leetcode
from ingest.leetcode import FetchError, FetchOk


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    def json(self):
        if self._text is not None:
            return json.loads(self._text)
        return self._payload


class FakeScraper:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        if self.exc is not None:
            raise self.exc
        return self.response


@pytest.fixture
def fake(monkeypatch):
    def install(**kwargs):
        scraper = FakeScraper(**kwargs)
        monkeypatch.setattr(leetcode, "scraper", scraper)
        return scraper

    return install


def test_calendar_ok(fake):
    scraper = fake(response=FakeResponse(payload={
        "totalActiveDays": 50,
        "streak": 12,
        "activeYears": [2023, 2024],
        "submissionCalendar": '{"1704067200":3}',
    }))

    res = leetcode.fetch_yearly_activity("alice", 2024)

    assert isinstance(res, FetchOk)
    assert res.value.total_active_days == 50
    assert res.value.active_years == (2023, 2024)
    assert res.value.submission_calendar == '{"1704067200":3}'
    url, params = scraper.calls[0]
    assert url.endswith("/alice/calendar")
    assert params == {"year": 2024}


def test_calendar_inline_object_is_serialised(fake):
    fake(response=FakeResponse(payload={
        "totalActiveDays": 1,
        "streak": 1,
        "activeYears": [2024],
        "submissionCalendar": {"1704067200": 3},
    }))

    res = leetcode.fetch_yearly_activity("alice", 2024)
    assert json.loads(res.value.submission_calendar) == {"1704067200": 3}


def test_rate_limit_is_distinguished(fake):
    fake(response=FakeResponse(status_code=429, payload={}))

    res = leetcode.fetch_problem_stats("alice")

    assert isinstance(res, FetchError)
    assert res.kind == "rate_limited"
    assert res.status == 429
    assert res.user_message == leetcode.RATE_LIMIT_MESSAGE


def test_non_success_status(fake):
    fake(response=FakeResponse(status_code=500, payload={}))

    res = leetcode.fetch_contest_stats("alice")
    assert isinstance(res, FetchError)
    assert res.kind == "http"
    assert res.user_message == "Failed to fetch user contest data"


def test_error_payload_is_malformed(fake):
    fake(response=FakeResponse(payload={"errors": [{"message": "That user does not exist."}]}))

    res = leetcode.fetch_yearly_activity("ghost", 2024)
    assert isinstance(res, FetchError)
    assert res.kind == "malformed"
    assert res.message == "That user does not exist."


def test_transport_error(fake):
    fake(exc=requests.ConnectionError("unreachable"))

    res = leetcode.fetch_topic_stats("alice")
    assert isinstance(res, FetchError)
    assert res.kind == "transport"


def test_invalid_json_body(fake):
    fake(response=FakeResponse(text="<html>oops</html>"))

    res = leetcode.fetch_problem_stats("alice")
    assert isinstance(res, FetchError)
    assert res.kind == "transport"


def test_profile_missing_fields(fake):
    fake(response=FakeResponse(payload={"easySolved": 1, "mediumSolved": 2}))

    res = leetcode.fetch_problem_stats("alice")
    assert isinstance(res, FetchError)
    assert "hardSolved" in res.message


def test_skills_missing_bucket_defaults_empty(fake):
    fake(response=FakeResponse(payload={
        "fundamental": [{"tagName": "Array", "tagSlug": "array", "problemsSolved": 10}],
        "advanced": None,
    }))

    res = leetcode.fetch_topic_stats("alice")
    assert isinstance(res, FetchOk)
    assert res.value["intermediate"] == []
    assert res.value["advanced"] == []
    assert res.value["fundamental"][0]["problemsSolved"] == 10


def test_error_object_instead_of_list(fake):
    fake(response=FakeResponse(payload={"errors": {"message": "User not found"}}))

    res = leetcode.fetch_problem_stats("ghost")
    assert isinstance(res, FetchError)
    assert res.kind == "malformed"
    assert res.message == "User not found"
