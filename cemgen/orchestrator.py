"""Pipeline orchestration: analyze modules, link them and emit the manifest."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .analyzers import ModuleAnalyzer, ModuleResult
from .config import CemConfig, load_config
from .diagnostics import Diagnostic, NoAnalyzableModulesError, Severity, sort_diagnostics
from .emitter import serialize
from .index import DEFAULT_MAX_HOPS, ModuleIndex
from .linker import Linker
from .loader import ModuleLoader, SourceFile
from .logging import get_logger, log_diagnostics
from .merger import ManifestMerger
from .models import Manifest, Module, Package
from .module_linker import link_exports
from .packages import load_dependencies
from .plugins import build_pipeline
from .plugins.pipeline import PluginPipeline
from .stores.module_cache import ModuleCache, fingerprint
from .validators import Validator
from .writer import update_package_json, write_manifest


@dataclass
class AnalysisResult:
    """Outcome of one analysis cycle."""

    manifest: Manifest
    document: Dict[str, Any]
    text: str
    diagnostics: List[Diagnostic] = field(default_factory=list)
    generation: int = 0

    @property
    def has_errors(self) -> bool:
        return any(item.severity in {Severity.ERROR, Severity.FATAL} for item in self.diagnostics)


class AnalysisSession:
    """Runs per-module analysis in parallel, then links and merges globally.

    Results of unchanged modules are served from the module cache, so a
    session can be re-run after edits and only the changed files are parsed
    again.
    """

    def __init__(
        self,
        *,
        pipeline: Optional[PluginPipeline] = None,
        packages: Sequence[Package] = (),
        workers: Optional[int] = None,
        max_hops: int = DEFAULT_MAX_HOPS,
        cache: Optional[ModuleCache] = None,
        validators: Optional[Sequence[Validator]] = None,
        diagnostics: Iterable[Diagnostic] = (),
    ) -> None:
        self.analyzer = ModuleAnalyzer(pipeline=pipeline)
        self.packages = tuple(packages)
        self.workers = workers
        self.max_hops = max_hops
        self.cache = cache if cache is not None else ModuleCache()
        self._validators = validators
        self._setup_diagnostics = list(diagnostics)
        self._signature = ",".join(self.analyzer.pipeline.names)
        self.logger = get_logger("orchestrator")

    def analyze(self, sources: Sequence[SourceFile]) -> AnalysisResult:
        ordered = sorted(sources, key=lambda source: source.path)
        self.cache.prune(source.path for source in ordered)
        results = self._analyze_modules(ordered)

        diagnostics: List[Diagnostic] = list(self._setup_diagnostics)
        modules: List[Module] = []
        for result in results:
            if result.module is None:
                diagnostics.extend(result.diagnostics)
            else:
                modules.append(result.module)
        if not modules:
            raise NoAnalyzableModulesError(sort_diagnostics(diagnostics))

        index = ModuleIndex(modules, self.packages, max_hops=self.max_hops)
        linked = Linker(index).link(modules)
        linked = link_exports(linked, index)
        merged = ManifestMerger(self.packages, self._validators).merge(linked)

        diagnostics.extend(merged.manifest.diagnostics)
        self.logger.debug(
            "Linked %d module(s) with %d package(s)", len(merged.manifest.modules), len(self.packages)
        )
        return AnalysisResult(
            manifest=merged.manifest,
            document=merged.document,
            text=serialize(merged.document),
            diagnostics=sort_diagnostics(diagnostics),
        )

    def rerun(self, sources: Sequence[SourceFile], changed_paths: Iterable[str]) -> AnalysisResult:
        """Invalidate ``changed_paths`` and analyze again."""
        self.cache.invalidate(changed_paths)
        return self.analyze(sources)

    def _analyze_modules(self, sources: Sequence[SourceFile]) -> List[ModuleResult]:
        if self.workers == 1 or len(sources) <= 1:
            return [self._analyze_one(source) for source in sources]
        # map() yields results in input order, independent of completion order.
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            return list(executor.map(self._analyze_one, sources))

    def _analyze_one(self, source: SourceFile) -> ModuleResult:
        if source.tree is not None or source.text is None:
            return self.analyzer.analyze(source.path, source.text, source.tree)
        digest = fingerprint(source.text)
        cached = self.cache.get(source.path, signature=self._signature, fingerprint=digest)
        if cached is not None:
            return cached
        result = self.analyzer.analyze(source.path, source.text)
        self.cache.store(source.path, signature=self._signature, fingerprint=digest, result=result)
        return result


class Orchestrator:
    """Coordinates a project run: config, dependencies, analysis and output."""

    def __init__(
        self,
        config: CemConfig,
        *,
        globs: Sequence[str] = (),
        exclude: Sequence[str] = (),
        loader: ModuleLoader | None = None,
        plugins: Sequence[str | object] = (),
        validators: Optional[Sequence[Validator]] = None,
    ) -> None:
        self.config = config
        self.root = config.root
        self.globs = config.merged_globs(globs, exclude)
        self.loader = loader or ModuleLoader()
        self.logger = get_logger("orchestrator")

        pipeline, plugin_diagnostics = build_pipeline(config.framework_flags, [*config.plugins, *plugins])
        packages, package_diagnostics = load_dependencies(
            self.root, [dependency.as_spec() for dependency in config.dependencies]
        )
        self.session = AnalysisSession(
            pipeline=pipeline,
            packages=packages,
            workers=config.workers,
            max_hops=config.max_reexport_hops,
            validators=validators,
            diagnostics=[*plugin_diagnostics, *package_diagnostics],
        )
        self._generation = 0
        self._generation_lock = threading.Lock()
        self._run_lock = threading.Lock()

    @classmethod
    def from_path(cls, path: str | Path, **kwargs: Any) -> "Orchestrator":
        return cls(load_config(Path(path)), **kwargs)

    @property
    def generation(self) -> int:
        return self._generation

    def run(self, changed_paths: Iterable[str] = (), *, write: bool = True) -> Optional[AnalysisResult]:
        """Analyze the project and write its manifest.

        Returns None when a newer cycle started while this one was running;
        the superseded cycle's output is discarded.
        """
        with self._generation_lock:
            self._generation += 1
            generation = self._generation
        changed = list(changed_paths)

        with self._run_lock:
            if generation != self._generation:
                self.logger.debug("Cycle %d superseded before it started", generation)
                return None
            sources = self.loader.load(self.root, self.globs)
            self.logger.info("Analyzing %d module(s) in %s", len(sources), self.root)
            if changed:
                result = self.session.rerun(sources, changed)
            else:
                result = self.session.analyze(sources)
            result.generation = generation

            if generation != self._generation:
                self.logger.debug("Cycle %d superseded; discarding its output", generation)
                return None
            log_diagnostics(self.logger, result.diagnostics)
            if write:
                self.write(result)
            return result

    def write(self, result: AnalysisResult) -> None:
        write_manifest(self.root, result.text, self.config.outdir)
        if self.config.packagejson:
            update_package_json(self.root, self.config.outdir)


def analyze_sources(
    sources: Sequence[SourceFile],
    *,
    flags: Mapping[str, bool] | Iterable[str] = (),
    plugins: Sequence[str | object] = (),
    packages: Sequence[Package] = (),
    workers: Optional[int] = None,
    max_hops: int = DEFAULT_MAX_HOPS,
) -> AnalysisResult:
    """One-shot analysis of in-memory sources without touching the filesystem."""
    pipeline, diagnostics = build_pipeline(flags, plugins)
    session = AnalysisSession(
        pipeline=pipeline,
        packages=packages,
        workers=workers,
        max_hops=max_hops,
        diagnostics=diagnostics,
    )
    return session.analyze(sources)


__all__ = ["AnalysisResult", "AnalysisSession", "Orchestrator", "analyze_sources"]
