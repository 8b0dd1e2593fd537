"""FastAPI application entrypoint for forge service mode."""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

import uvicorn
from fastapi import Depends, FastAPI, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..builder import BuildResult, RegistryBuilder
from ..config import ForgeConfig, load_config
from ..library import ComponentLibrary, ValidationReport
from ..validators import ValidationIssue

T = TypeVar("T")


class HealthResponse(BaseModel):
    status: str


class IssueModel(BaseModel):
    component: str
    kind: str
    message: str
    path: Optional[str] = None


class ComponentListResponse(BaseModel):
    total: int
    components: List[Dict[str, Any]]


class ValidateRequest(BaseModel):
    path: str = "."
    strict: Optional[bool] = None
    fix: bool = False


class ValidateResponse(BaseModel):
    ok: bool
    components: List[str]
    issues: List[IssueModel]


class BuildRequest(BaseModel):
    path: str = "."
    strict: Optional[bool] = None
    exclude_invalid: bool = False


class BuildResponse(BaseModel):
    ok: bool
    components: List[str]
    issues: List[IssueModel]
    excluded: List[str]
    output_dir: Optional[str] = None
    last_updated: Optional[str] = None


def _issue_models(issues: List[ValidationIssue]) -> List[IssueModel]:
    return [IssueModel(**issue.to_dict()) for issue in issues]


async def _run_blocking(func: Callable[[], T]) -> T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def create_app(
    config_loader: Callable[[Path], ForgeConfig] = load_config,
    builder_factory: Callable[[], RegistryBuilder] = RegistryBuilder,
) -> FastAPI:
    """Create the FastAPI application exposing forge operations."""

    app = FastAPI(title="Forge Registry Service", version="1.0.0")
    # Writes that share an output directory run one at a time.
    output_locks: Dict[Path, threading.Lock] = {}
    output_locks_guard = threading.Lock()

    def output_lock(config: ForgeConfig) -> threading.Lock:
        with output_locks_guard:
            return output_locks.setdefault(config.output_path, threading.Lock())

    def load(path: str) -> ForgeConfig:
        return config_loader(Path(path).expanduser().resolve())

    async def get_builder() -> RegistryBuilder:
        # Fresh builder per request so the clock and scanner carry no state.
        return builder_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/components", response_model=ComponentListResponse)
    async def list_components(
        path: str = ".",
        category: Optional[str] = None,
        tag: Optional[str] = None,
        builder: RegistryBuilder = Depends(get_builder),
    ) -> ComponentListResponse:
        def _list() -> List[Dict[str, Any]]:
            library = ComponentLibrary(load(path), builder=builder)
            return [
                component.to_dict()
                for component in library.list_components(category=category, tag=tag)
            ]

        components = await _run_blocking(_list)
        return ComponentListResponse(total=len(components), components=components)

    @app.get("/search", response_model=ComponentListResponse)
    async def search_components(
        q: str = Query(..., min_length=1),
        path: str = ".",
        category: Optional[str] = None,
        builder: RegistryBuilder = Depends(get_builder),
    ) -> ComponentListResponse:
        def _search() -> List[Dict[str, Any]]:
            library = ComponentLibrary(load(path), builder=builder)
            return [component.to_dict() for component in library.search(q, category=category)]

        components = await _run_blocking(_search)
        return ComponentListResponse(total=len(components), components=components)

    @app.post("/validate", response_model=ValidateResponse)
    async def validate_library(
        payload: ValidateRequest,
        builder: RegistryBuilder = Depends(get_builder),
    ) -> ValidateResponse:
        def _validate() -> ValidationReport:
            config = load(payload.path)
            library = ComponentLibrary(config, builder=builder)
            if not payload.fix:
                return library.validate(strict=payload.strict)
            with output_lock(config):
                return library.validate(fix=True, strict=payload.strict)

        report = await _run_blocking(_validate)
        return ValidateResponse(
            ok=report.ok,
            components=report.components,
            issues=_issue_models(report.issues),
        )

    @app.post("/build", response_model=BuildResponse)
    async def build_registry(
        payload: BuildRequest,
        builder: RegistryBuilder = Depends(get_builder),
    ) -> BuildResponse:
        config = await _run_blocking(lambda: load(payload.path))
        policy = "exclude" if payload.exclude_invalid else None

        def _build() -> BuildResult:
            with output_lock(config):
                return builder.build(config, strict=payload.strict, on_invalid=policy)

        result = await _run_blocking(_build)
        return BuildResponse(
            ok=result.ok,
            components=[component.name for component in result.components],
            issues=_issue_models(result.issues),
            excluded=result.excluded,
            output_dir=str(config.output_path) if result.registry is not None else None,
            last_updated=result.registry.last_updated if result.registry is not None else None,
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]
