import argparse
import sys
from typing import List, Optional

from pydantic import ValidationError

from Filters.registry import FILTERS, get_filter_factory
from Pipelines.parallel_pipeline import ParallelPipeline
from Utils.errors import PipelineError
from Utils.settings import PipelineSettings, get_settings
from Utils.thread_log import setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="parallel-stemmer", description="Stem every line of a text file with a pool of worker threads")
    p.add_argument("input_file", nargs="?", default=None, help="Input text file (default: input.txt)")
    p.add_argument("output_file", nargs="?", default=None, help="Output text file (default: output.txt)")
    p.add_argument("--n-workers", type=int, default=None, help="Number of transform workers")
    p.add_argument("--queue-size", type=int, default=None, help="Bounded queue size between stages")
    p.add_argument("--timeout", type=float, default=None, help="Seconds to wait for workers to drain")
    p.add_argument("--transform", choices=sorted(FILTERS), default=None, help="Line transform to apply")
    p.add_argument("--preserve-order", action="store_true", default=None, help="Write output lines in input order")
    p.add_argument("--dlq-dir", default=None, help="Directory for dead-letter entries of failed lines")
    p.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ...)")
    return p


def resolve_settings(parser: argparse.ArgumentParser, args: argparse.Namespace) -> PipelineSettings:
    overrides = {
        "input_path": args.input_file,
        "output_path": args.output_file,
        "n_workers": args.n_workers,
        "queue_size": args.queue_size,
        "join_timeout": args.timeout,
        "transform": args.transform,
        "preserve_order": args.preserve_order,
        "dlq_dir": args.dlq_dir,
        "log_level": args.log_level,
    }
    base = get_settings().model_dump()
    base.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return PipelineSettings(**base)
    except ValidationError as e:
        parser.error(str(e))


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = resolve_settings(parser, args)
    setup_logging(settings.log_level)

    if args.input_file is None:
        print(f"Using default input file: {settings.input_path}")
    else:
        print(f"Using input file: {settings.input_path}")
    if args.output_file is None:
        print(f"Using default output file: {settings.output_path}")

    try:
        pipeline = ParallelPipeline(
            input_path=settings.input_path,
            output_path=settings.output_path,
            n_workers=settings.n_workers,
            queue_size=settings.queue_size,
            filter_factory=get_filter_factory(settings.transform),
            join_timeout=settings.join_timeout,
            preserve_order=settings.preserve_order,
            dlq_dir=settings.dlq_dir,
        )
        result = pipeline.run()
        result.raise_for_status()
    except (PipelineError, ValueError) as e:
        print(f"Error processing file: {e}", file=sys.stderr)
        return 1

    if result.transform_errors:
        print(f"{result.transform_errors} line(s) could not be transformed and were passed through", file=sys.stderr)
    print(f"Processed {result.lines_read} lines, wrote {result.lines_written} to {settings.output_path} in {result.duration:.4f}s")
    print("File processing completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
