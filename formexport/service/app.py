"""FastAPI application entrypoint for formexport service mode."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import parse_form_config, parse_network_config
from ..errors import ExportError, UnsupportedEcosystemError
from ..logging import configure_logging
from ..models import ExportOptions
from ..orchestrator import PACKAGE_JSON_PATH, ExportPipeline


class ExportOptionsPayload(BaseModel):
    env: str = "production"
    project_name: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    license: Optional[str] = None
    dependencies: Dict[str, str] = Field(default_factory=dict)
    packed_tarball_map: Dict[str, str] = Field(default_factory=dict)


class ExportRequest(BaseModel):
    form: Dict[str, Any]
    network: Dict[str, Any]
    options: ExportOptionsPayload = Field(default_factory=ExportOptionsPayload)
    base_package_json: Optional[str] = None


class ExportResponse(BaseModel):
    ecosystem: str
    env: str
    files: Dict[str, str]


class EcosystemsResponse(BaseModel):
    ecosystems: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_pipeline() -> ExportPipeline:
    return ExportPipeline.from_path(Path("."))


def create_app(
    pipeline_factory: Callable[[], ExportPipeline] = _default_pipeline,
) -> FastAPI:
    """Create the FastAPI application exposing export operations."""

    app = FastAPI(title="FormExport Service", version="1.0.0")
    cached: Dict[str, ExportPipeline] = {}

    async def get_pipeline() -> ExportPipeline:
        # One pipeline per process so the adapter registry and config cache are shared.
        if "pipeline" not in cached:
            cached["pipeline"] = pipeline_factory()
        return cached["pipeline"]

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/ecosystems", response_model=EcosystemsResponse)
    async def ecosystems(
        pipeline: ExportPipeline = Depends(get_pipeline),
    ) -> EcosystemsResponse:
        return EcosystemsResponse(ecosystems=await pipeline.list_ecosystems())

    @app.post("/export", response_model=ExportResponse)
    async def export(
        payload: ExportRequest,
        pipeline: ExportPipeline = Depends(get_pipeline),
    ) -> ExportResponse:
        form = parse_form_config(payload.form)
        network = parse_network_config(payload.network)
        options = ExportOptions(**payload.options.model_dump())
        base_files = {}
        if payload.base_package_json is not None:
            base_files[PACKAGE_JSON_PATH] = payload.base_package_json
        result = await pipeline.export(form, network, options, base_files=base_files)
        files = {
            path: content if isinstance(content, str) else content.decode("utf-8", errors="replace")
            for path, content in sorted(result.files.items())
        }
        return ExportResponse(ecosystem=result.ecosystem, env=result.env, files=files)

    @app.exception_handler(UnsupportedEcosystemError)
    async def unsupported_ecosystem_handler(
        _: Any, exc: UnsupportedEcosystemError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ExportError)
    async def export_error_handler(
        _: Any, exc: ExportError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(
        _: Any, exc: ValueError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "0.0.0.0", port: int = 8000, *, verbose: bool = False
) -> None:  # pragma: no cover - integration path
    import uvicorn

    configure_logging(verbose=verbose)
    app = create_app()
    uvicorn.run(app, host=host, port=port)
