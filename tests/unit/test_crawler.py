# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from urllib.parse import urlsplit

import httpx
import pytest

from pathfuzz.config import HttpSettings
from pathfuzz.http.adapters import StubHttpClient
from pathfuzz.http.crawl import CrawlState, crawl, extract_links
from pathfuzz.http.httpx_client import HttpxClient
from pathfuzz.http.models import HttpResponse

SEED = "http://example.test"


def _site(pages: dict[str, str], **extra: HttpResponse) -> StubHttpClient:
    stub = StubHttpClient()
    for path, body in pages.items():
        stub.add_page(f"{SEED}{path}", body)
    for url, response in extra.items():
        stub.add(url, response)
    return stub


def test_extract_links_handles_quotes_and_case():
    body = """<a HREF = "/one">1</a><a href='/two'>2</a><link href="/three" rel=x>"""
    assert extract_links(body) == ["/one", "/two", "/three"]


def test_crawl_state_insert_if_absent():
    state = CrawlState()
    assert state.mark_visited("http://example.test/a") is True
    assert state.mark_visited("http://example.test/a") is False
    assert state.visited == {"http://example.test/a"}


@pytest.mark.anyio
async def test_crawl_filters_foreign_static_and_non_navigable_links():
    stub = _site(
        {
            "/": """
                <a href="/admin">admin</a>
                <a href="login">login</a>
                <a href="https://example.test/secure">other scheme</a>
                <a href="http://evil.test/x">other domain</a>
                <a href="http://sub.example.test/x">subdomain</a>
                <a href="#top">anchor</a>
                <a href="mailto:root@example.test">mail</a>
                <a href="javascript:void(0)">js</a>
                <a href="tel:123">tel</a>
                <a href="data:text/plain,hi">data</a>
                <img href="/logo.png"><link href="/site.css"><a href="/bundle.js">s</a>
                <a href="/docs/manual.PDF">pdf</a><a href="/font.woff2">f</a><a href="/backup.zip">z</a>
            """,
        }
    )
    found = await crawl(stub, SEED, max_depth=1, max_pages=50)
    assert found == {"http://example.test/admin", "http://example.test/login"}


@pytest.mark.anyio
async def test_crawl_deduplicates_repeated_links_and_excludes_seed():
    stub = _site({"/": '<a href="/a">1</a><a href="/a">2</a><a href="/">home</a><a href="/a#frag">3</a>'})
    found = await crawl(stub, SEED, max_depth=3, max_pages=50)
    assert found == {"http://example.test/a"}
    assert [r.url for r in stub.requests].count("http://example.test/a") == 1


@pytest.mark.anyio
async def test_crawl_respects_depth_budget():
    stub = _site(
        {
            "/": '<a href="/l1">1</a>',
            "/l1": '<a href="/l2">2</a>',
            "/l2": '<a href="/l3">3</a>',
            "/l3": '<a href="/l4">4</a>',
        }
    )
    assert await crawl(stub, SEED, max_depth=2, max_pages=50) == {"http://example.test/l1", "http://example.test/l2"}
    assert await crawl(_site({"/": '<a href="/l1">1</a>'}), SEED, max_depth=0, max_pages=50) == set()


@pytest.mark.anyio
async def test_crawl_respects_page_budget():
    links = "".join(f'<a href="/p{i}">{i}</a>' for i in range(20))
    stub = _site({"/": links, **{f"/p{i}": '<a href="/deeper">d</a>' for i in range(20)}})
    found = await crawl(stub, SEED, max_depth=5, max_pages=7)
    assert len(found) == 7
    assert await crawl(stub, SEED, max_depth=5, max_pages=0) == set()


@pytest.mark.anyio
async def test_crawl_handles_cycles():
    stub = _site(
        {
            "/": '<a href="/a">a</a>',
            "/a": '<a href="/b">b</a><a href="/">home</a>',
            "/b": '<a href="/a">a</a><a href="/c">c</a>',
            "/c": '<a href="/a">a</a>',
        }
    )
    found = await crawl(stub, SEED, max_depth=10, max_pages=100)
    assert found == {"http://example.test/a", "http://example.test/b", "http://example.test/c"}
    fetched = [r.url for r in stub.requests]
    assert len(fetched) == len(set(fetched))


@pytest.mark.anyio
async def test_crawl_skips_non_html_and_failed_pages():
    stub = _site(
        {"/": '<a href="/feed">feed</a><a href="/down">down</a><a href="/page">page</a>'},
        **{
            "http://example.test/feed": HttpResponse(
                ok=True, status_code=200, headers={"content-type": "application/json"}, text='{"href": "/hidden"}'
            ),
            "http://example.test/page": HttpResponse(
                ok=True, status_code=200, headers={"content-type": "text/html"}, text='<a href="/deep">deep</a>'
            ),
        },
    )
    found = await crawl(stub, SEED, max_depth=3, max_pages=50)
    # /feed and /down are still discoveries from the seed page; only their own links are skipped.
    assert found == {
        "http://example.test/feed",
        "http://example.test/down",
        "http://example.test/page",
        "http://example.test/deep",
    }
    assert "http://example.test/hidden" not in found


@pytest.mark.anyio
async def test_crawl_resolves_relative_links_against_current_page():
    stub = _site({"/": '<a href="/docs/">docs</a>', "/docs/": '<a href="intro">intro</a><a href="../about">about</a>'})
    found = await crawl(stub, SEED, max_depth=2, max_pages=50)
    assert found == {"http://example.test/docs/", "http://example.test/docs/intro", "http://example.test/about"}


@pytest.mark.anyio
async def test_crawl_sends_cookies_and_headers():
    stub = _site({"/": "<p>nothing</p>"})
    await crawl(stub, SEED, cookies=[("session", "abc"), ("x", "1")], headers=[("X-Api-Key", "k")])
    sent = stub.requests[0].headers
    assert ("X-Api-Key", "k") in sent
    assert ("Cookie", "session=abc; x=1") in sent


@pytest.mark.anyio
async def test_crawl_unparseable_seed_returns_empty_set():
    stub = StubHttpClient()
    assert await crawl(stub, "not a url") == set()
    assert await crawl(stub, "") == set()
    assert stub.requests == []


@pytest.mark.anyio
async def test_crawl_results_share_seed_origin():
    stub = _site(
        {
            "/": '<a href="/a">a</a><a href="http://example.test:8080/b">b</a><a href="//cdn.test/c">c</a>',
        }
    )
    seed_parts = urlsplit(SEED)
    for url in await crawl(stub, SEED, max_depth=2, max_pages=50):
        parts = urlsplit(url)
        assert parts.scheme == seed_parts.scheme
        assert parts.hostname == seed_parts.hostname


@pytest.mark.anyio
async def test_crawl_resolves_links_against_redirect_target():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/":
            return httpx.Response(301, headers={"Location": "/app/"})
        if request.url.path == "/app/":
            return httpx.Response(200, html='<a href="login">in</a><a href="../about">about</a><a href="/">home</a>')
        return httpx.Response(404, text="missing")

    client = HttpxClient(HttpSettings(), client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    found = await crawl(client, SEED, max_depth=2)
    await client.aclose()

    assert found == {"http://example.test/app/login", "http://example.test/about"}


@pytest.mark.anyio
async def test_crawl_ignores_pages_that_redirect_off_site():
    stub = StubHttpClient()
    stub.add(
        f"{SEED}/",
        HttpResponse(
            ok=True,
            status_code=200,
            headers={"content-type": "text/html"},
            text='<a href="/admin">admin</a>',
            url="http://elsewhere.test/",
        ),
    )
    assert await crawl(stub, SEED) == set()


@pytest.mark.anyio
async def test_crawl_skips_redirects_onto_already_visited_pages():
    stub = _site({"/": '<a href="/old">old</a><a href="/new">new</a>', "/new": '<a href="/deep">deep</a>'})
    stub.add(
        f"{SEED}/old",
        HttpResponse(
            ok=True,
            status_code=200,
            headers={"content-type": "text/html"},
            text='<a href="/never">never</a>',
            url=f"{SEED}/new",
        ),
    )
    found = await crawl(stub, SEED, max_depth=3)
    assert f"{SEED}/never" not in found
    assert found == {f"{SEED}/old", f"{SEED}/new", f"{SEED}/deep"}
