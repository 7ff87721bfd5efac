# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for pathfuzz."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any

import httpx

from .errors import ConfigError
from .version import __version__

DEFAULT_USER_AGENT = f"pathfuzz/{__version__}"
DEFAULT_MATCHER = "200,301,302,401,403,405,500"
PROXY_SCHEMES = frozenset({"http", "https", "socks5", "socks5h"})

KeyValue = tuple[str, str]


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    timeout: float = 10.0
    max_retries: int = 0
    backoff_factor: float = 2.0
    initial_delay: float = 0.5
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    max_body_bytes: int = 16 * 1024 * 1024

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _int_env("PATHFUZZ_HTTP_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        max_retries = _int_env("PATHFUZZ_HTTP_RETRIES", cls.max_retries)
        return cls(
            timeout=_float_env("PATHFUZZ_HTTP_TIMEOUT", cls.timeout),
            max_retries=max(0, max_retries),
            backoff_factor=_float_env("PATHFUZZ_HTTP_BACKOFF", cls.backoff_factor),
            initial_delay=_float_env("PATHFUZZ_HTTP_INITIAL_DELAY", cls.initial_delay),
            user_agent=os.getenv("PATHFUZZ_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("PATHFUZZ_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("PATHFUZZ_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=max_body_bytes,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


class FailurePolicy(str, Enum):
    """What the dispatcher does with a target whose request never produced a status."""

    DISCARD = "discard"
    LOG = "log"
    COLLECT = "collect"


def parse_matcher(value: str | Iterable[int] | None) -> frozenset[int]:
    """Parse ``"200,301"`` (or an iterable of ints) into a set of status codes."""
    if value is None:
        value = DEFAULT_MATCHER
    if isinstance(value, str):
        raw_items: Iterable[Any] = value.split(",")
    else:
        raw_items = value
    codes: set[int] = set()
    for item in raw_items:
        try:
            code = int(str(item).strip())
        except ValueError:
            continue
        if 100 <= code <= 599:
            codes.add(code)
    return frozenset(codes)


def split_kv(raw: str) -> KeyValue:
    """Split ``key:value`` on the first colon, trimming both halves."""
    key, _, value = str(raw).partition(":")
    return key.strip(), value.strip()


def _coerce_pairs(name: str, value: Any) -> list[KeyValue]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ConfigError(f"'{name}' must be a list of [key, value] pairs")
    pairs: list[KeyValue] = []
    for item in value:
        if isinstance(item, str):
            pairs.append(split_kv(item))
            continue
        if isinstance(item, (list, tuple)) and len(item) == 2:
            pairs.append((str(item[0]).strip(), str(item[1]).strip()))
            continue
        raise ConfigError(f"'{name}' entries must be [key, value] pairs or 'key:value' strings, got {item!r}")
    return pairs


def validate_proxy(proxy: str) -> str:
    """Return the proxy URL unchanged, or raise ConfigError when httpx could not use it."""
    try:
        url = httpx.URL(proxy)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigError(f"Invalid proxy URL {proxy!r}: {exc}") from exc
    if url.scheme not in PROXY_SCHEMES or not url.host:
        raise ConfigError(f"Invalid proxy URL {proxy!r}: expected one of {', '.join(sorted(PROXY_SCHEMES))} with a host")
    return proxy


@dataclass(frozen=True)
class RequestConfig:
    """Immutable per-run request settings shared read-only by every dispatcher worker."""

    concurrency: int = 40
    timeout: float = 10.0
    rate_limit_ms: int = 0
    headers: tuple[KeyValue, ...] = ()
    cookies: tuple[KeyValue, ...] = ()
    bearer_token: str | None = None
    proxy: str | None = None
    match_codes: frozenset[int] = field(default_factory=lambda: parse_matcher(DEFAULT_MATCHER))

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ConfigError("concurrency must be a positive integer")
        if self.timeout <= 0:
            raise ConfigError("timeout must be positive")
        if self.rate_limit_ms < 0:
            raise ConfigError("rate limit must not be negative")


_INT_KEYS = {"threads", "rate_limit", "crawl_depth", "crawl_pages", "retries"}
_FLOAT_KEYS = {"timeout"}
_BOOL_KEYS = {"mutate", "crawl", "verify_ssl"}
_PAIR_KEYS = {"headers", "cookies"}


@dataclass
class RunConfig:
    """Everything a single run needs: file keys, flags, and their defaults."""

    url: str | None = None
    wordlist: str | None = None
    threads: int = 40
    timeout: float = 10.0
    matcher: str = DEFAULT_MATCHER
    headers: list[KeyValue] = field(default_factory=list)
    cookies: list[KeyValue] = field(default_factory=list)
    auth_token: str | None = None
    proxy: str | None = None
    rate_limit: int = 0
    export: str | None = None
    mutate: bool = False
    payloads: str | None = None
    crawl: bool = False
    crawl_depth: int = 2
    crawl_pages: int = 100
    openapi: str | None = None
    analyze: str | None = None
    failures: FailurePolicy = FailurePolicy.DISCARD
    retries: int | None = None
    verify_ssl: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, base: RunConfig | None = None) -> RunConfig:
        """Layer ``data`` over ``base`` (or defaults). None values keep the base value."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown)}")

        updates: dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                continue
            updates[key] = _coerce_value(key, value)
        return replace(base or cls(), **updates)

    @classmethod
    def from_file(cls, path: str) -> RunConfig:
        """Read a TOML config file."""
        try:
            with open(path, "rb") as handle:
                data = tomllib.load(handle)
        except OSError as exc:
            raise ConfigError(f"Failed to read config {path}: {exc}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Failed to parse TOML config {path}: {exc}") from exc
        return cls.from_mapping(data)

    @property
    def match_codes(self) -> frozenset[int]:
        return parse_matcher(self.matcher)

    def validate(self) -> RunConfig:
        if self.threads < 1:
            raise ConfigError("threads must be a positive integer")
        if self.timeout <= 0:
            raise ConfigError("timeout must be positive")
        if self.rate_limit < 0:
            raise ConfigError("rate_limit must not be negative")
        if self.crawl_depth < 0 or self.crawl_pages < 0:
            raise ConfigError("crawl budgets must not be negative")
        if self.retries is not None and self.retries < 0:
            raise ConfigError("retries must not be negative")
        if self.proxy:
            validate_proxy(self.proxy)
        needs_target = bool(self.wordlist or self.crawl or self.openapi)
        if needs_target and not self.analyze and not self.url:
            raise ConfigError("A target url is required to fuzz or crawl")
        return self

    def request_config(self) -> RequestConfig:
        return RequestConfig(
            concurrency=self.threads,
            timeout=float(self.timeout),
            rate_limit_ms=self.rate_limit,
            headers=tuple(self.headers),
            cookies=tuple(self.cookies),
            bearer_token=self.auth_token or None,
            proxy=self.proxy or None,
            match_codes=self.match_codes,
        )

    def http_settings(self, base: HttpSettings | None = None) -> HttpSettings:
        settings = replace(base or load_http_settings())
        settings.timeout = float(self.timeout)
        settings.verify_ssl = settings.verify_ssl and self.verify_ssl
        if self.retries is not None:
            settings.max_retries = self.retries
        return settings


def _coerce_value(key: str, value: Any) -> Any:
    if key in _PAIR_KEYS:
        return _coerce_pairs(key, value)
    if key in _BOOL_KEYS:
        if not isinstance(value, bool):
            raise ConfigError(f"'{key}' must be a boolean")
        return value
    if key in _INT_KEYS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"'{key}' must be an integer")
        return value
    if key in _FLOAT_KEYS:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"'{key}' must be a number")
        return float(value)
    if key == "matcher":
        if isinstance(value, (list, tuple)):
            return ",".join(str(item) for item in value)
        return str(value)
    if key == "failures":
        if isinstance(value, FailurePolicy):
            return value
        try:
            return FailurePolicy(str(value).strip().lower())
        except ValueError as exc:
            choices = ", ".join(p.value for p in FailurePolicy)
            raise ConfigError(f"'failures' must be one of {choices}") from exc
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string")
    return value


def load_run_config(config_path: str | None = None, overrides: Mapping[str, Any] | None = None) -> RunConfig:
    """Build a validated RunConfig: defaults, then the config file, then explicit flags."""
    config = RunConfig.from_file(config_path) if config_path else RunConfig()
    if overrides:
        config = RunConfig.from_mapping(overrides, base=config)
    return config.validate()


__all__ = [
    "DEFAULT_MATCHER",
    "DEFAULT_USER_AGENT",
    "FailurePolicy",
    "HttpSettings",
    "RequestConfig",
    "RunConfig",
    "load_http_settings",
    "load_run_config",
    "parse_matcher",
    "split_kv",
    "validate_proxy",
]
