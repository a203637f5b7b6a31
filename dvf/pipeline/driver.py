"""Per-vintage orchestration: load, geocode, then export at three levels."""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from dvf.common.concurrency import run_bounded
from dvf.common.constants import DEFAULT_CONCURRENCY
from dvf.common.logging import log_event, log_warning
from dvf.common.models import Row
from dvf.common.parse import departement_from_commune
from dvf.common.time_utils import elapsed_ms
from dvf.pipeline.aggregate import by_commune, by_departement
from dvf.pipeline.enrich import enrich_rows
from dvf.pipeline.export import commune_path, departement_path, full_path, write_rows
from dvf.pipeline.ingest import load_vintage_rows, source_path
from dvf.sources.cadastre import GeometryProvider
from dvf.sources.cultures import ReferenceData


@dataclass(frozen=True)
class PipelineContext:
    run_id: str
    pipeline_config: dict
    data_dir: Path
    dist_dir: Path
    reference: ReferenceData
    cadastre: GeometryProvider
    logger: logging.Logger
    concurrency: int = DEFAULT_CONCURRENCY


@dataclass
class VintageStats:
    vintage: str
    rows: int = 0
    located: int = 0
    communes: int = 0
    departements: int = 0
    skipped_rows: int = 0
    files: list[Path] = field(default_factory=list)


@dataclass
class StageCounts:
    rows_in: int = 0
    rows_out: int = 0


@contextmanager
def _stage(ctx: PipelineContext, vintage: str, stage: str) -> Iterator[StageCounts]:
    started_at = time.monotonic()
    counts = StageCounts()
    log_event(ctx.logger, f"{stage} start", run_id=ctx.run_id, vintage=vintage, stage=stage, event="STAGE_START", status="ok")
    yield counts
    log_event(
        ctx.logger,
        f"{stage} end",
        run_id=ctx.run_id,
        vintage=vintage,
        stage=stage,
        event="STAGE_END",
        status="ok",
        rows_in=counts.rows_in,
        rows_out=counts.rows_out,
        duration_ms=elapsed_ms(started_at),
    )


def _warn_blank_group(ctx: PipelineContext, vintage: str, stage: str, rows: list[Row]) -> None:
    log_warning(
        ctx.logger,
        f"{len(rows)} rows without commune code left out of {stage}",
        run_id=ctx.run_id,
        vintage=vintage,
        stage=stage,
        event="GROUP_SKIPPED",
        status="warning",
        rows_in=len(rows),
        rows_out=0,
    )


async def load_stage(ctx: PipelineContext, vintage: str, stats: VintageStats) -> list[Row]:
    path = source_path(ctx.data_dir, ctx.pipeline_config, vintage)
    encoding = ctx.pipeline_config["source"]["encoding"]
    with _stage(ctx, vintage, "load") as counts:
        rows = await asyncio.to_thread(load_vintage_rows, path, ctx.reference, encoding)
        counts.rows_out = stats.rows = len(rows)
    return rows


async def geocode_stage(ctx: PipelineContext, vintage: str, rows: list[Row], stats: VintageStats) -> None:
    communes = by_commune(rows)

    async def _geocode(code_commune: str) -> None:
        if not code_commune:
            return
        parcelles = await asyncio.to_thread(ctx.cadastre.parcelles, code_commune)
        stats.located += enrich_rows(communes[code_commune], parcelles, source_epsg=ctx.cadastre.epsg)

    with _stage(ctx, vintage, "geocode") as counts:
        counts.rows_in = len(rows)
        await run_bounded(list(communes), _geocode, limit=ctx.concurrency)
        counts.rows_out = stats.located


async def export_communes_stage(ctx: PipelineContext, vintage: str, rows: list[Row], stats: VintageStats) -> None:
    communes = by_commune(rows)
    output = ctx.pipeline_config["output"]
    if "" in communes:
        blank = communes.pop("")
        stats.skipped_rows = len(blank)
        _warn_blank_group(ctx, vintage, "export-communes", blank)

    async def _export(code_commune: str) -> None:
        path = commune_path(ctx.dist_dir, output, vintage, departement_from_commune(code_commune), code_commune)
        stats.files.append(await asyncio.to_thread(write_rows, path, communes[code_commune]))

    with _stage(ctx, vintage, "export-communes") as counts:
        counts.rows_in = len(rows)
        await run_bounded(list(communes), _export, limit=ctx.concurrency)
        stats.communes = len(communes)
        counts.rows_out = sum(len(group) for group in communes.values())


async def export_departements_stage(ctx: PipelineContext, vintage: str, rows: list[Row], stats: VintageStats) -> None:
    departements = by_departement(rows)
    output = ctx.pipeline_config["output"]
    if "" in departements:
        _warn_blank_group(ctx, vintage, "export-departements", departements.pop(""))

    async def _export(code_departement: str) -> None:
        path = departement_path(ctx.dist_dir, output, vintage, code_departement)
        stats.files.append(await asyncio.to_thread(write_rows, path, departements[code_departement]))

    with _stage(ctx, vintage, "export-departements") as counts:
        counts.rows_in = len(rows)
        await run_bounded(list(departements), _export, limit=ctx.concurrency)
        stats.departements = len(departements)
        counts.rows_out = sum(len(group) for group in departements.values())


async def export_full_stage(ctx: PipelineContext, vintage: str, rows: list[Row], stats: VintageStats) -> None:
    path = full_path(ctx.dist_dir, ctx.pipeline_config["output"], vintage)
    with _stage(ctx, vintage, "export-full") as counts:
        counts.rows_in = len(rows)
        stats.files.append(await asyncio.to_thread(write_rows, path, rows))
        counts.rows_out = len(rows)


async def process_vintage(ctx: PipelineContext, vintage: str) -> VintageStats:
    started_at = time.monotonic()
    stats = VintageStats(vintage=vintage)
    log_event(ctx.logger, f"vintage {vintage} start", run_id=ctx.run_id, vintage=vintage, event="VINTAGE_START", status="ok")

    rows = await load_stage(ctx, vintage, stats)
    await geocode_stage(ctx, vintage, rows, stats)
    await export_communes_stage(ctx, vintage, rows, stats)
    await export_departements_stage(ctx, vintage, rows, stats)
    await export_full_stage(ctx, vintage, rows, stats)

    log_event(
        ctx.logger,
        f"vintage {vintage} end: {stats.located}/{stats.rows} rows located",
        run_id=ctx.run_id,
        vintage=vintage,
        event="VINTAGE_END",
        status="ok",
        rows_in=stats.rows,
        rows_out=stats.located,
        duration_ms=elapsed_ms(started_at),
    )
    return stats


async def run_pipeline(ctx: PipelineContext, vintages: list[str]) -> list[VintageStats]:
    """Process vintages one at a time, most recent first.

    Any exception aborts the run, including vintages not yet started.
    """
    started_at = time.monotonic()
    log_event(ctx.logger, "run start", run_id=ctx.run_id, event="RUN_START", status="ok")
    results = []
    for vintage in sorted(vintages, reverse=True):
        results.append(await process_vintage(ctx, vintage))
    log_event(ctx.logger, "run end", run_id=ctx.run_id, event="RUN_END", status="ok", duration_ms=elapsed_ms(started_at))
    return results
