"""
smooth-generator: command line entry point.

    smooth-generator products 100 [--type simple|variable]
    smooth-generator orders 100 [--date-start 2024-01-01] [--date-end 2024-02-01]
                                [--status completed] [--coupons] [--skip-order-attribution]
    smooth-generator customers 50 [--country ES] [--type person|company]
    smooth-generator coupons 10 [--min 5] [--max 100]
    smooth-generator terms 20 [--taxonomy product_cat] [--max-depth 3] [--parent 12]

    smooth-generator job start products 250 [--param type=simple]
    smooth-generator job status | cancel | run

    smooth-generator export orders orders.parquet
    smooth-generator serve [--host 127.0.0.1] [--port 8000]

Direct commands generate in this process and report how long it took. Job
commands go through the persisted job and the batch controller, the same
path the admin API's heartbeat drives. `serve` runs that admin API with uvicorn.
"""
import argparse
import logging
import os
import sys
import time
from typing import Any, Dict, List, Optional

from smooth_generator.catalog import OBJECT_MODELS
from smooth_generator.config import load_settings
from smooth_generator.errors import GenerationError, JobStateError
from smooth_generator.generators.terms import TermGenerator
from smooth_generator.jobs.store import JOB_TYPE
from smooth_generator.runtime import Runtime, build_runtime

logger = logging.getLogger(__name__)

DIRECT_COMMANDS = {
    # command: (default amount, maximum amount)
    "products": (100, None),
    "orders": (100, None),
    "customers": (100, None),
    "coupons": (10, None),
    "terms": (10, 100),
}


def display_time(seconds: float) -> str:
    if seconds < 60:
        return f"{round(seconds, 2)} seconds"
    minutes = round(seconds / 60)
    return f"{minutes} min" if minutes == 1 else f"{minutes} mins"


def _direct_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Generator arguments from the parsed command line, dropping anything unset."""
    names = ["type", "date_start", "date_end", "status", "coupons", "skip_order_attribution",
             "country", "min", "max", "taxonomy", "max_depth", "parent"]
    return {name: getattr(args, name) for name in names if getattr(args, name, None) not in (None, False)}


def _parse_params(pairs: Optional[List[str]]) -> Dict[str, str]:
    params = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Parameters must look like key=value, got '{pair}'")
        params[key] = value
    return params


# ═══════════════════════════════════════════════════════════════
# COMMANDS
# ═══════════════════════════════════════════════════════════════

def generate_directly(runtime: Runtime, command: str, amount: Optional[int], gen_args: Dict[str, Any]) -> int:
    default_amount, maximum = DIRECT_COMMANDS[command]
    amount = amount or default_amount
    if maximum is not None and amount > maximum:
        print(f"Error: Amount cannot be over {maximum}.")
        return 1

    generator = runtime.registry.resolve(command)
    time_start = time.time()
    print(f"Generating {amount} {command}...")

    try:
        if isinstance(generator, TermGenerator):
            generator.batch(amount, gen_args)
        else:
            for i in range(1, amount + 1):
                generator.generate(True, **gen_args)
                if i % 25 == 0 and i < amount:
                    print(f"  {i}/{amount}")
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print(f"Success: {amount} {command} generated in {display_time(time.time() - time_start)}")
    return 0


def job_command(runtime: Runtime, args: argparse.Namespace) -> int:
    store = runtime.store

    if args.job_action == "start":
        if args.generator not in runtime.registry:
            print(f'Error: A generator for "{args.generator}" can\'t be found.')
            return 1
        try:
            job = store.create(args.generator, args.amount, _parse_params(args.param))
        except (JobStateError, ValueError) as e:
            print(f"Error: {e}")
            return 1
        print(f"Started: {job.amount} {job.generator_key} queued as a background job")
        return 0

    if args.job_action == "status":
        job = store.get_current_and_reconcile()
        if job is None:
            print("No job in progress.")
        else:
            print(f"{job.generator_key}: {job.processed}/{job.amount} processed, {job.pending} pending")
        last_error = runtime.controller.last_errors.get(JOB_TYPE)
        if last_error:
            print(f"Last error: {last_error}")
        return 0

    if args.job_action == "cancel":
        had_job = store.peek() is not None
        store.delete_current()
        print("Job cancelled." if had_job else "No job to cancel.")
        return 0

    if args.job_action == "run":
        job = store.get_current_and_reconcile()
        if job is None:
            print("No job in progress.")
            return 0
        time_start = time.time()
        try:
            processed = runtime.controller.run_until_exhausted(JOB_TYPE, max_iterations=args.max_iterations)
        except GenerationError as e:
            print(f"Error: {e}")
            return 1
        remaining = store.peek()
        if remaining:
            print(f"Paused: {remaining.processed}/{remaining.amount} {remaining.generator_key} processed")
        else:
            print(f"Success: {processed} {job.generator_key} generated in {display_time(time.time() - time_start)}")
        return 0

    return 1


def serve_command(runtime: Runtime, host: str, port: int) -> int:
    import uvicorn

    from smooth_generator.api import create_app

    print(f"Serving the admin API on http://{host}:{port}")
    uvicorn.run(create_app(runtime=runtime), host=host, port=port)
    return 0


def export_command(runtime: Runtime, object_type: str, output: str) -> int:
    df = runtime.catalog.to_frame(object_type)
    if df.is_empty():
        print(f"No {object_type} objects to export.")
        return 0
    if output.endswith(".parquet"):
        df.write_parquet(output)
    else:
        df.write_ndjson(output)
    print(f"Exported {df.height} {object_type} rows to {output}")
    return 0


# ═══════════════════════════════════════════════════════════════
# ARGUMENTS
# ═══════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smooth-generator", description="Generate store test data.")
    parser.add_argument("--config", type=str, default=None, help="Path to smoothgenerator.yaml")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("products", help="Generate products")
    p.add_argument("amount", type=int, nargs="?")
    p.add_argument("--type", choices=["simple", "variable"])

    p = sub.add_parser("orders", help="Generate orders")
    p.add_argument("amount", type=int, nargs="?")
    p.add_argument("--date-start", dest="date_start")
    p.add_argument("--date-end", dest="date_end")
    p.add_argument("--status")
    p.add_argument("--coupons", action="store_true")
    p.add_argument("--skip-order-attribution", dest="skip_order_attribution", action="store_true")

    p = sub.add_parser("customers", help="Generate customers")
    p.add_argument("amount", type=int, nargs="?")
    p.add_argument("--country", help="ISO 3166-1 alpha-2 code")
    p.add_argument("--type", choices=["person", "company"])

    p = sub.add_parser("coupons", help="Generate coupons")
    p.add_argument("amount", type=int, nargs="?")
    p.add_argument("--min", type=int)
    p.add_argument("--max", type=int)

    p = sub.add_parser("terms", help="Generate product categories or tags")
    p.add_argument("amount", type=int, nargs="?")
    p.add_argument("--taxonomy", choices=["product_cat", "product_tag"])
    p.add_argument("--max-depth", dest="max_depth", type=int)
    p.add_argument("--parent", type=int)

    job = sub.add_parser("job", help="Manage the background generation job")
    job_sub = job.add_subparsers(dest="job_action", required=True)
    start = job_sub.add_parser("start")
    start.add_argument("generator")
    start.add_argument("amount", type=int)
    start.add_argument("--param", action="append", help="Generator argument as key=value (repeatable)")
    job_sub.add_parser("status")
    job_sub.add_parser("cancel")
    run = job_sub.add_parser("run")
    run.add_argument("--max-iterations", dest="max_iterations", type=int)

    p = sub.add_parser("export", help="Export generated objects with polars")
    p.add_argument("object_type", choices=sorted(OBJECT_MODELS))
    p.add_argument("output", help="Output file (.parquet, anything else is written as NDJSON)")

    p = sub.add_parser("serve", help="Run the admin API")
    p.add_argument("--host", default=os.environ.get("SMOOTHGEN_HOST", "127.0.0.1"))
    p.add_argument("--port", type=int, default=int(os.environ.get("SMOOTHGEN_PORT", "8000")))

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    runtime = build_runtime(load_settings(args.config))
    try:
        if args.command in DIRECT_COMMANDS:
            return generate_directly(runtime, args.command, args.amount, _direct_args(args))
        if args.command == "job":
            return job_command(runtime, args)
        if args.command == "export":
            return export_command(runtime, args.object_type, args.output)
        if args.command == "serve":
            return serve_command(runtime, args.host, args.port)
        return 1
    finally:
        runtime.close()


if __name__ == "__main__":
    sys.exit(main())
