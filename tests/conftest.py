import pytest

BASE_URL = "https://news.example.com/a/b"

PARAGRAPHS = [
    "The city council met on Tuesday evening to debate the new transit plan, which "
    "would add three bus lines and extend service hours across the northern districts. "
    "Members spent most of the session on the question of funding.",
    "Supporters argued that the expansion would cut commute times for thousands of "
    "residents who currently rely on a single overcrowded route. Several speakers "
    "described waiting more than forty minutes for a bus during the morning rush.",
    "Opponents questioned whether ridership projections were realistic, noting that "
    "earlier forecasts had overestimated demand by a wide margin. They asked the "
    "transit authority to publish its models before any final vote takes place.",
    "The council is expected to return to the proposal next month after a series of "
    "public hearings in each affected neighborhood. Residents can also submit written "
    "comments through the city website until the end of the month.",
]


@pytest.fixture
def base_url():
    return BASE_URL


@pytest.fixture
def paragraphs():
    return list(PARAGRAPHS)


@pytest.fixture
def article_html():
    p1, p2, p3 = PARAGRAPHS[:3]
    return f"""
    <html>
      <head><title>Test</title></head>
      <body>
        <nav><a href="/">Home</a> <a href="/world">World</a></nav>
        <article>
          <h2>Introduction</h2>
          <p>{p1}</p>
          <img src="/x.jpg" width="300" height="300">
          <p>{p2}</p>
          <p>{p3}</p>
        </article>
        <footer><p>Footer text that should never be part of the extracted article body.</p></footer>
      </body>
    </html>
    """


class FakeResponse:
    def __init__(self, status_code=200, text="", content=b"", headers=None):
        self.status_code = status_code
        self.text = text
        self.content = content
        self.headers = headers or {}

    def raise_for_status(self):
        import requests

        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeSession:
    """Maps URLs to canned responses or exceptions and records requests."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse
