# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
import random

import pytest

from pathfuzz import runtime
from pathfuzz.cli.main import _format_result, build_parser, main
from pathfuzz.config import FailurePolicy, HttpSettings, RunConfig
from pathfuzz.http.adapters import StubHttpClient
from pathfuzz.http.models import HttpResponse
from pathfuzz.models.result import FuzzResult
from pathfuzz.report.export import export_results
from pathfuzz.runtime import PathFuzz

BASE = "http://example.test"


class ClosingStub(StubHttpClient):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


def _scenario_client() -> ClosingStub:
    return ClosingStub(
        {
            f"{BASE}/admin": HttpResponse(ok=True, status_code=200, text="welcome"),
            f"{BASE}/login": HttpResponse(ok=True, status_code=404, text="not here"),
        }
    )


@pytest.fixture
def wordlist(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("admin\nlogin\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def stub_factory(monkeypatch):
    created: list[ClosingStub] = []

    def factory(settings=None, *, proxy=None):  # noqa: ARG001
        client = _scenario_client()
        created.append(client)
        return client

    monkeypatch.setattr(runtime, "create_default_http_client", factory)
    return created


def test_build_parser_flags():
    args = build_parser().parse_args(
        [
            "-u",
            BASE,
            "-w",
            "words.txt",
            "-t",
            "5",
            "--header",
            "X-A:1",
            "--header",
            "X-B:2",
            "--cookie",
            "sid:abc",
            "--crawl",
            "--failures",
            "collect",
            "--ignore-ssl-errors",
        ]
    )
    assert args.url == BASE
    assert args.threads == 5
    assert args.headers == ["X-A:1", "X-B:2"]
    assert args.cookies == ["sid:abc"]
    assert args.crawl is True
    assert args.mutate is None
    assert args.failures == "collect"
    assert args.ignore_ssl_errors is True


def test_main_without_input_is_usage_error(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2
    assert "required" in capsys.readouterr().err


@pytest.mark.parametrize(
    "extra",
    [
        ["-t", "0"],
        ["-T", "0"],
        ["--proxy", "ftp://proxy.test"],
    ],
)
def test_main_config_errors_exit_one(wordlist, extra, capsys):
    assert main(["-u", BASE, "-w", wordlist, *extra]) == 1
    assert "pathfuzz: error:" in capsys.readouterr().err


def test_main_missing_wordlist_exits_one(tmp_path, stub_factory, capsys):  # noqa: ARG001
    assert main(["-u", BASE, "-w", str(tmp_path / "none.txt"), "--no-progress"]) == 1
    assert "Failed to load wordlist" in capsys.readouterr().err


def test_main_requires_target_url(wordlist, capsys):
    assert main(["-w", wordlist]) == 1
    assert "A target url is required" in capsys.readouterr().err


def test_main_bad_config_file(tmp_path, capsys):
    path = tmp_path / "config.toml"
    path.write_text("url = [unterminated", encoding="utf-8")
    assert main(["-c", str(path)]) == 1
    assert "Failed to parse TOML config" in capsys.readouterr().err


def test_main_fuzzes_and_exports(wordlist, tmp_path, stub_factory, capsys):
    export = tmp_path / "out" / "results.json"
    exit_code = main(["-u", BASE, "-w", wordlist, "-m", "200,403", "--no-progress", "--export", str(export)])
    assert exit_code == 0

    output = capsys.readouterr().out
    assert f":: URL              : {BASE}" in output
    assert f"200 - {BASE}/admin" in output
    assert f"404 - {BASE}/login" not in output
    assert ":: Fuzzing complete!" in output
    assert ":: 1 results exported" in output

    assert json.loads(export.read_text(encoding="utf-8")) == [
        {"url": f"{BASE}/admin", "word": "admin", "status": 200, "reflected": False, "error": None}
    ]
    assert stub_factory[0].closed is True


def test_main_reads_config_file_and_flags_override(wordlist, tmp_path, stub_factory, capsys):
    config = tmp_path / "config.toml"
    config.write_text(
        f'url = "http://ignored.test"\nwordlist = "{wordlist}"\nthreads = 3\nmatcher = "404"\n',
        encoding="utf-8",
    )
    assert main(["-c", str(config), "-u", BASE, "--no-progress"]) == 0
    output = capsys.readouterr().out
    assert ":: Threads          : 3" in output
    assert f"404 - {BASE}/login" in output
    assert f"200 - {BASE}/admin" not in output
    assert {request.url for request in stub_factory[0].requests} == {f"{BASE}/admin", f"{BASE}/login"}


def test_main_export_failure_still_exits_zero(wordlist, tmp_path, stub_factory, capsys):  # noqa: ARG001
    exit_code = main(["-u", BASE, "-w", wordlist, "--no-progress", "--export", str(tmp_path / "results.xml")])
    assert exit_code == 0
    assert "Unknown export format" in capsys.readouterr().err


def test_main_analyze(tmp_path, capsys):
    path = tmp_path / "results.csv"
    export_results(
        [
            FuzzResult(url=f"{BASE}/admin", word="admin", status=200),
            FuzzResult(url=f"{BASE}/debug", word="debug", status=500, reflected=True, error="Possible error detected"),
        ],
        str(path),
    )
    assert main(["--analyze", str(path)]) == 0
    output = capsys.readouterr().out
    assert ":: Total results    : 2" in output
    assert ":: 5xx              : 1" in output
    assert f"{BASE}/debug" in output


def test_main_analyze_missing_file(tmp_path, capsys):
    assert main(["--analyze", str(tmp_path / "missing.json")]) == 1
    assert "Failed to read" in capsys.readouterr().err


def test_format_result_lines():
    assert _format_result(FuzzResult(url=f"{BASE}/a", word="a", status=200, reflected=True)) == f"200 - {BASE}/a [REFLECTED]"
    assert (
        _format_result(FuzzResult(url=f"{BASE}/a", word="a", status=500, error="Possible error detected"))
        == f"500 - {BASE}/a [ERROR]"
    )
    assert _format_result(FuzzResult(url=f"{BASE}/a", word="a", status=0, error="Network timeout: t")) == (
        f"ERR  - {BASE}/a [error: Network timeout: t]"
    )


@pytest.mark.anyio
async def test_runtime_run_end_to_end(wordlist):
    client = _scenario_client()
    run_config = RunConfig(url=BASE, wordlist=wordlist, matcher="200,403").validate()
    async with PathFuzz(client, settings=HttpSettings()) as fuzzer:
        results = await fuzzer.run(run_config)
    assert results.snapshot() == [FuzzResult(url=f"{BASE}/admin", word="admin", status=200, reflected=False, error=None)]
    assert client.closed is True


@pytest.mark.anyio
async def test_runtime_collect_policy_keeps_transport_failures(wordlist):
    client = ClosingStub({f"{BASE}/admin": HttpResponse(ok=True, status_code=200)})
    run_config = RunConfig(url=BASE, wordlist=wordlist, failures=FailurePolicy.COLLECT).validate()
    fuzzer = PathFuzz(client, settings=HttpSettings())
    results = await fuzzer.run(run_config)
    by_word = {result.word: result for result in results}
    assert by_word["admin"].status == 200
    assert by_word["login"].status == 0
    assert by_word["login"].error.endswith("No stubbed response configured")


def test_collect_words_adds_mutations_then_payloads(wordlist, tmp_path):
    payloads = tmp_path / "payloads.txt"
    payloads.write_text("../etc/passwd\n", encoding="utf-8")
    run_config = RunConfig(url=BASE, wordlist=wordlist, mutate=True, payloads=str(payloads))
    words = PathFuzz(StubHttpClient(), settings=HttpSettings()).collect_words(run_config, rng=random.Random(1))
    assert words[:2] == ["admin", "login"]
    assert len(words) == 2 + 10 + 1
    assert words[2:4] == ["ADMIN", "nimda"]
    assert words[-1] == "../etc/passwd"


@pytest.mark.anyio
async def test_prepare_targets_merges_crawl_and_openapi(wordlist):
    client = StubHttpClient()
    client.add_page(f"{BASE}/", '<a href="/about">About</a><a href="/admin">Admin</a>')
    client.add(
        f"{BASE}/openapi.json",
        HttpResponse(ok=True, status_code=200, text=json.dumps({"paths": {"/api/users/{id}": {}}})),
    )
    run_config = RunConfig(url=BASE, wordlist=wordlist, crawl=True, crawl_depth=1, openapi=f"{BASE}/openapi.json")
    seen: list[tuple[str, str]] = []

    fuzzer = PathFuzz(client, settings=HttpSettings())
    targets = await fuzzer.prepare_targets(run_config, on_discovered=lambda source, url: seen.append((source, url)))

    assert targets == [
        f"{BASE}/admin",
        f"{BASE}/login",
        f"{BASE}/about",
        f"{BASE}/api/users/1",
    ]
    assert ("crawl", f"{BASE}/about") in seen
    assert ("openapi", f"{BASE}/api/users/1") in seen


def test_from_run_config_applies_retries_and_tls(monkeypatch):
    captured = {}

    def factory(settings=None, *, proxy=None):
        captured["settings"] = settings
        captured["proxy"] = proxy
        return StubHttpClient()

    monkeypatch.setattr(runtime, "create_default_http_client", factory)
    run_config = RunConfig(url=BASE, retries=2, verify_ssl=False, timeout=3, proxy="socks5://127.0.0.1:9050")
    PathFuzz.from_run_config(run_config)
    assert captured["settings"].max_retries == 2
    assert captured["settings"].verify_ssl is False
    assert captured["settings"].timeout == 3.0
    assert captured["proxy"] == "socks5://127.0.0.1:9050"
