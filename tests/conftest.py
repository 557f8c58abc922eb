from typing import Dict, List

import httpx
import pytest

SEED = "https://example.org/sede/portal/etopia"


def page(body: str, title: str = "Etopia") -> str:
    return f"<html lang='es'><head><title>{title}</title></head><body>{body}</body></html>"


# path -> html; paths missing here answer 404, paths mapped to None answer 500
SITE: Dict[str, str] = {
    "/sede/portal/etopia": page(
        "<img src='logo.png'/>"
        "<a href='/sede/portal/etopia/broken'>Broken</a>"
        "<a href='/sede/portal/etopia/about'>About</a>"
        "<a href='/sede/portal/etopia/news?page=2'>News</a>"
        "<a href='/sede/portal/etopia/about#top'>Top of about</a>"
        "<a href='/sede/portal/etopia/servicio/x'>Service</a>"
        "<a href='/sede/portal/otro/page'>Other portal</a>"
        "<a href='https://elsewhere.org/sede/portal/etopia/about'>Elsewhere</a>"
        "<a href='mailto:info@example.org'>Mail</a>"
        "<a href='http://[bad'>Bad</a>"
    ),
    "/sede/portal/etopia/broken": None,
    "/sede/portal/etopia/about": page(
        "<h1>About</h1>"
        "<a href='/sede/portal/etopia/about/team'>Team</a>"
        "<a href='/sede/portal/etopia/news'>News</a>"
    ),
    "/sede/portal/etopia/about/team": page(
        "<a href='/sede/portal/etopia/about/team/deep'>Deep</a>"
    ),
    "/sede/portal/etopia/about/team/deep": page("<p>deep</p>"),
    "/sede/portal/etopia/news": page(
        "<a href='/sede/portal/etopia/about'>About</a>"
        "<a href='/sede/portal/etopia/news/archive'>Archive</a>"
    ),
    "/sede/portal/etopia/news/archive": page("<p style='color:#777777;background-color:#ffffff'>old</p>"),
}


class RecordingSite:
    """Serves SITE through an httpx MockTransport and records requested paths."""

    def __init__(self, site: Dict[str, str]):
        self.site = site
        self.requested: List[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requested.append(path)
        if path not in self.site:
            return httpx.Response(404, text="")
        body = self.site[path]
        if body is None:
            return httpx.Response(500, text="boom")
        return httpx.Response(200, text=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def site():
    return RecordingSite(SITE)
