# src/fnrunner/core/engine/engine.py
"""
Engine de execução do fnrunner (Pipeline + FunctionRunner).

Fluxo de uma run (estritamente downstream):

    Collector → Discoverer → InclusionPolicy/Sorter
              → (FilterFactory × ScopeGuard) → Pipeline → Writer

Regras de execução:
- A cadeia ordenada de Filters é construída uma única vez e é imutável
- Cada Filter recebe a saída do anterior; não há execução concorrente
- A primeira falha interrompe a run: nenhum Filter seguinte é executado
  e nada é escrito (sem commit parcial)
- Um Filter que devolve zero Resources é válido
- Toda falha propaga como uma única exceção tipada (FnRunnerException)

Rastreabilidade:
- Cada estágio registra eventos estruturados no RunContext
- Quando `manifest_path` está configurado, o Manifest é salvo ao fim da
  run, inclusive em caso de falha
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Sequence, Tuple

from fnrunner.core.config.hashing import compute_config_hash
from fnrunner.core.config.settings import RunConfig
from fnrunner.core.errors import error_payload_from_exception
from fnrunner.core.exceptions import (
    FilterExecutionError,
    FnRunnerException,
    ResourceWriteError,
    RunConfigurationError,
)
from fnrunner.core.io.collector import collect_package, collect_sources
from fnrunner.core.io.writer import write_in_place, write_stream
from fnrunner.core.pipeline.context import RunContext
from fnrunner.core.pipeline.filter import Filter, FilterFactory
from fnrunner.core.pipeline.types import (
    FilterResult,
    FilterStatus,
    FunctionSpec,
    Resource,
)
from fnrunner.core.traceability.manifest import (
    RunManifest,
    create_manifest,
    function_failed,
    function_finished,
    function_started,
    save_manifest,
)

from .discovery import Discovery, discover
from .planner import plan_functions
from .scope import scope_filter


@dataclass(frozen=True)
class ChainLink:
    """Uma função da cadeia: sua FunctionSpec e o Filter (já com escopo aplicado)."""

    spec: FunctionSpec
    filter: Filter


@dataclass(frozen=True)
class FilterChain:
    """Sequência ordenada e imutável de (FunctionSpec, Filter)."""

    links: Tuple[ChainLink, ...] = ()

    def __iter__(self) -> Iterator[ChainLink]:
        return iter(self.links)

    def __len__(self) -> int:
        return len(self.links)

    def images(self) -> List[str]:
        return [link.spec.image for link in self.links]


def build_filter_chain(specs: Sequence[FunctionSpec], factory: FilterFactory) -> FilterChain:
    """
    Constrói a cadeia de Filters a partir das FunctionSpecs já ordenadas.

    Cada Filter recebe uma cópia própria do documento de configuração da função.

    Raises:
        RunConfigurationError: a factory falhou ou devolveu algo que não é Filter.
    """
    links: List[ChainLink] = []
    for spec in specs:
        try:
            fltr = factory(spec.image, spec.home, copy.deepcopy(spec.config))
        except FnRunnerException:
            raise
        except Exception as e:
            raise RunConfigurationError(
                message=f"cannot build filter for image {spec.image}: {e}",
                details={"image": spec.image, "path": spec.path},
            ) from e

        if not isinstance(fltr, Filter):
            raise RunConfigurationError(
                message=f"filter factory returned {type(fltr).__name__} for image {spec.image}",
                details={"image": spec.image, "path": spec.path},
                hint="A factory deve devolver um objeto com apply(resources) -> resources",
            )
        links.append(ChainLink(spec=spec, filter=scope_filter(spec, fltr)))
    return FilterChain(links=tuple(links))


class Pipeline:
    """Executa a cadeia ordenada de Filters sobre a lista de Resources."""

    def __init__(
        self,
        *,
        chain: FilterChain,
        ctx: RunContext,
        manifest: Optional[RunManifest] = None,
    ):
        self.chain = chain
        self.ctx = ctx
        self.manifest = manifest
        self.results: List[FilterResult] = []

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _record(self, result: FilterResult) -> None:
        self.results.append(result)
        if self.manifest is not None and result.status is FilterStatus.SUCCESS:
            function_finished(
                self.manifest,
                function_id=result.function_id,
                ts=self._now(),
                result=result.to_dict(),
            )

    def run(self, resources: Sequence[Resource]) -> List[Resource]:
        current: List[Resource] = list(resources)

        for position, link in enumerate(self.chain):
            spec = link.spec
            function_id = f"{position}:{spec.image}"
            self.ctx.log(
                stage="pipeline",
                level="info",
                message="filter started",
                position=position,
                image=spec.image,
                home=spec.home,
                scope=spec.scope.value,
                resources_in=len(current),
            )
            if self.manifest is not None:
                function_started(
                    self.manifest,
                    function_id=function_id,
                    image=spec.image,
                    home=spec.home,
                    ts=self._now(),
                )

            try:
                output = link.filter.apply(list(current))
                if not isinstance(output, list) or not all(isinstance(r, Resource) for r in output):
                    raise TypeError("Filter.apply must return a list of Resource")
            except Exception as e:
                error = (
                    e
                    if isinstance(e, FilterExecutionError)
                    else FilterExecutionError(
                        message=f"function {spec.image} (position {position}) failed: {e}",
                        details={
                            "image": spec.image,
                            "position": position,
                            "path": spec.path,
                            "exception_class": e.__class__.__name__,
                        },
                    )
                )
                payload = error_payload_from_exception(error)
                self.ctx.log(
                    stage="pipeline",
                    level="error",
                    message="filter failed",
                    position=position,
                    image=spec.image,
                    error=payload.to_dict(),
                )
                self.results.append(
                    FilterResult(
                        position=position,
                        image=spec.image,
                        home=spec.home,
                        status=FilterStatus.FAILED,
                        resources_in=len(current),
                        summary=error.message,
                    )
                )
                if self.manifest is not None:
                    function_failed(
                        self.manifest,
                        function_id=function_id,
                        ts=self._now(),
                        error=payload.to_dict(),
                    )
                if error is e:
                    raise
                raise error from e

            self._record(
                FilterResult(
                    position=position,
                    image=spec.image,
                    home=spec.home,
                    status=FilterStatus.SUCCESS,
                    resources_in=len(current),
                    resources_out=len(output),
                    summary=f"{len(current)} -> {len(output)} resources",
                )
            )
            self.ctx.log(
                stage="pipeline",
                level="info",
                message="filter finished",
                position=position,
                image=spec.image,
                resources_out=len(output),
            )
            current = output

        return current


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma run."""

    resources: List[Resource] = field(default_factory=list)
    chain: List[str] = field(default_factory=list)
    results: List[FilterResult] = field(default_factory=list)
    written: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    ctx: Optional[RunContext] = None


def _default_filter_factory() -> FilterFactory:
    from fnrunner.filters.container import container_filter_factory

    return container_filter_factory


class FunctionRunner:
    """
    Orquestrador de uma run: descobre, ordena, executa e escreve.

    Args:
        config: configuração imutável da run.
        filter_factory: `(image, home, config) -> Filter`; por padrão,
            ContainerFilter.
        ctx: RunContext da run; criado automaticamente quando omitido.
    """

    def __init__(
        self,
        *,
        config: RunConfig,
        filter_factory: Optional[FilterFactory] = None,
        ctx: Optional[RunContext] = None,
    ):
        self.config = config
        self.filter_factory: FilterFactory = filter_factory or _default_filter_factory()
        self.ctx: RunContext = ctx or RunContext.new(config)

    # ------------------------------------------------------------------
    # Estágios
    # ------------------------------------------------------------------

    def load(self) -> Discovery:
        """Coleta o pacote e as fontes explícitas e separa as funções."""
        package = collect_package(self.config.package_root)
        sources = collect_sources(self.config.function_paths, start_index=len(package))
        self.ctx.log(
            stage="load",
            level="info",
            message="documents collected",
            package_documents=len(package),
            source_documents=[len(s) for s in sources],
        )

        discovery = discover(package, sources, global_scope=self.config.global_scope)
        for ignored in discovery.ignored:
            self.ctx.add_warning(
                stage="discovery",
                message=f"ignoring non-function document {ignored.path} in function source",
            )
        self.ctx.log(
            stage="discovery",
            level="info",
            message="functions discovered",
            resources=len(discovery.resources),
            implicit=[s.image for s in discovery.implicit],
            explicit=[s.image for s in discovery.explicit],
        )
        return discovery

    def plan(self, discovery: Discovery) -> List[FunctionSpec]:
        """Aplica a InclusionPolicy e ordena as funções."""
        specs = plan_functions(
            discovery.implicit,
            discovery.explicit,
            policy=self.config.inclusion,
            has_explicit_sources=self.config.has_explicit_sources,
        )
        self.ctx.log(
            stage="plan",
            level="info",
            message="functions ordered",
            inclusion=self.config.inclusion.value,
            order=[s.image for s in specs],
        )
        return specs

    def build_chain(self, discovery: Optional[Discovery] = None) -> FilterChain:
        """Constrói a cadeia ordenada e com escopo aplicado, sem executá-la."""
        if discovery is None:
            discovery = self.load()
        return build_filter_chain(self.plan(discovery), self.filter_factory)

    def _new_manifest(self) -> Optional[RunManifest]:
        if self.config.manifest_path is None:
            return None
        from fnrunner import __version__

        return create_manifest(
            run_id=self.ctx.run_id,
            started_at=self.ctx.created_at,
            fnrunner_version=__version__,
            config_hash=compute_config_hash(self.config.to_dict()),
            package_root=str(self.config.package_root),
            function_paths=[str(p) for p in self.config.function_paths],
        )

    def _save_manifest(self, manifest: RunManifest) -> None:
        path = self.config.manifest_path
        try:
            save_manifest(manifest, path)
        except (OSError, TypeError, ValueError) as e:
            raise ResourceWriteError(
                message=f"cannot save manifest {path}: {e}",
                details={"path": str(path)},
            ) from e

    def _write(self, discovery: Discovery, resources: List[Resource]) -> Tuple[List[str], List[str]]:
        if self.config.writes_in_place:
            summary = write_in_place(
                self.config.package_root,
                resources,
                original_paths=[r.path for r in discovery.resources],
                retained=discovery.function_documents,
            )
            self.ctx.log(
                stage="write",
                level="info",
                message="package written in place",
                written=list(summary.written),
                deleted=list(summary.deleted),
            )
            return list(summary.written), list(summary.deleted)

        write_stream(self.config.output, resources)
        self.ctx.log(
            stage="write",
            level="info",
            message="resources written to output",
            resources=len(resources),
        )
        return [], []

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------

    def execute(self) -> RunResult:
        """
        Executa a run completa.

        Raises:
            ResourceLoadError, FunctionDiscoveryError, RunConfigurationError,
            FilterExecutionError, ResourceWriteError (inclusive falha ao salvar
            o Manifest após uma run bem-sucedida).
        """
        manifest = self._new_manifest()
        try:
            discovery = self.load()
            chain = self.build_chain(discovery)
            pipeline = Pipeline(chain=chain, ctx=self.ctx, manifest=manifest)
            try:
                resources = pipeline.run(discovery.resources)
            finally:
                results = list(pipeline.results)
            written, deleted = self._write(discovery, resources)
        except Exception as e:
            payload = error_payload_from_exception(e)
            self.ctx.log(stage=payload.stage, level="error", message="run failed", error=payload.to_dict())
            if manifest is not None:
                manifest.outcome = {"status": "failed", "error": payload.to_dict()}
                try:
                    self._save_manifest(manifest)
                except ResourceWriteError as save_error:
                    self.ctx.add_warning(stage="write", message=save_error.message)
            raise

        if manifest is not None:
            manifest.outcome = {"status": "success", "written": written, "deleted": deleted}
            self._save_manifest(manifest)

        return RunResult(
            resources=resources,
            chain=chain.images(),
            results=results,
            written=written,
            deleted=deleted,
            ctx=self.ctx,
        )
