import httpx
import pytest

from grater.errors import ScoreFetchError
from grater.scorecard import fetch_scorecard_score, scorecard_url


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_scorecard_url_uses_owner_and_repo():
    url = scorecard_url("github.com/acme/app")
    assert url == "https://api.securityscorecards.dev/projects/github.com/acme/app"


def test_scorecard_url_rejects_foreign_hosts():
    with pytest.raises(ScoreFetchError):
        scorecard_url("gitlab.com/acme/app")
    with pytest.raises(ScoreFetchError):
        scorecard_url("github.com/acme")


def test_fetch_scorecard_score_reads_score():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/projects/github.com/acme/app"
        return httpx.Response(200, json={"score": 7.3, "checks": []})

    assert fetch_scorecard_score(_client(handler), "github.com/acme/app") == pytest.approx(7.3)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404, json={"error": "not found"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"checks": []}),
        httpx.Response(200, json={"score": "high"}),
    ],
)
def test_fetch_scorecard_score_failures(response):
    client = _client(lambda request: response)
    with pytest.raises(ScoreFetchError):
        fetch_scorecard_score(client, "github.com/acme/app")


def test_fetch_scorecard_score_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(ScoreFetchError):
        fetch_scorecard_score(_client(handler), "github.com/acme/app")


@pytest.mark.parametrize("body", ['{"score": NaN}', '{"score": Infinity}', '{"score": 1e999}'])
def test_fetch_scorecard_score_rejects_non_finite(body):
    client = _client(lambda request: httpx.Response(200, text=body))
    with pytest.raises(ScoreFetchError, match="non-finite"):
        fetch_scorecard_score(client, "github.com/acme/app")


@pytest.mark.parametrize(
    "exc",
    [httpx.InvalidURL("bad url"), httpx.StreamConsumed()],
)
def test_fetch_scorecard_score_wraps_non_transport_errors(exc):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    with pytest.raises(ScoreFetchError):
        fetch_scorecard_score(_client(handler), "github.com/acme/app")
