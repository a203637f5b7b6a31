"""CLI entrypoint for the DVF geolocated export pipeline."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from dvf.common.config_loader import load_all_configs, resolve_vintages
from dvf.common.constants import EXIT_FAILURE, EXIT_SUCCESS
from dvf.common.errors import PipelineError
from dvf.common.ids import generate_run_id
from dvf.common.logging import build_logger, log_failure
from dvf.pipeline.driver import PipelineContext, run_pipeline
from dvf.sources.cadastre import CadastreProvider
from dvf.sources.cultures import load_reference_data


def _positive_int(value: str) -> int:
    parsed = int(value)
    if parsed < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return parsed


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--vintage", action="append", default=None, help="Year to process; repeatable")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--dist-dir", default="./dist")
    parser.add_argument("--concurrency", type=_positive_int, default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)
    dist_dir = Path(args.dist_dir)

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)

    try:
        bundle = load_all_configs(config_dir, overlay_config_dir=overlay_config_dir)
        vintages = resolve_vintages(bundle.pipeline, args.vintage)
        reference = load_reference_data(bundle)
        with CadastreProvider(bundle.pipeline["cadastre"], data_dir) as cadastre:
            ctx = PipelineContext(
                run_id=run_id,
                pipeline_config=bundle.pipeline,
                data_dir=data_dir,
                dist_dir=dist_dir,
                reference=reference,
                cadastre=cadastre,
                logger=logger,
                concurrency=args.concurrency or bundle.pipeline["concurrency"],
            )
            asyncio.run(run_pipeline(ctx, vintages))
    except PipelineError as exc:
        log_failure(logger, f"run failed: {exc}", run_id=run_id, event="RUN_FAIL", status="error", error_code=exc.error_code)
        return EXIT_FAILURE
    except Exception as exc:
        log_failure(
            logger,
            f"unexpected failure: {exc}",
            run_id=run_id,
            event="RUN_FAIL",
            status="error",
            error_code="UNEXPECTED_ERROR",
        )
        return EXIT_FAILURE

    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    return run_command(args)


if __name__ == "__main__":
    raise SystemExit(main())
