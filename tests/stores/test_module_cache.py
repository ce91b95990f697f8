"""Tests for the module cache store."""

from __future__ import annotations

from cemgen.analyzers import ModuleResult
from cemgen.models import Module
from cemgen.stores.module_cache import ModuleCache, fingerprint


def _result(path: str) -> ModuleResult:
    return ModuleResult(path=path, module=Module(path=path))


def test_module_cache_round_trip() -> None:
    cache = ModuleCache()
    result = _result("src/a.js")
    cache.store("src/a.js", signature="lit", fingerprint=fingerprint("class A {}"), result=result)

    assert "src/a.js" in cache
    assert cache.get("src/a.js", signature="lit", fingerprint=fingerprint("class A {}")) is result


def test_module_cache_misses_on_signature_or_text_change() -> None:
    cache = ModuleCache()
    cache.store("src/a.js", signature="lit", fingerprint="fp", result=_result("src/a.js"))

    assert cache.get("src/a.js", signature="lit,fast", fingerprint="fp") is None
    assert cache.get("src/a.js", signature="lit", fingerprint="fp-changed") is None
    assert cache.get("src/b.js", signature="lit", fingerprint="fp") is None


def test_module_cache_invalidate_and_prune() -> None:
    cache = ModuleCache()
    for path in ("a.js", "b.js", "c.js"):
        cache.store(path, signature="", fingerprint="fp", result=_result(path))

    cache.invalidate(["a.js", "missing.js"])
    cache.prune(["b.js"])

    assert len(cache) == 1
    assert "b.js" in cache


def test_fingerprint_accepts_text_and_bytes() -> None:
    assert fingerprint("héllo") == fingerprint("héllo".encode("utf-8"))
    assert fingerprint("a") != fingerprint("b")
