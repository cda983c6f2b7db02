"""
Command-line interface for tlsvect.

Provides commands for vectorizing synthetic shapes and benchmarking the
presets.
"""

import argparse
import sys
import time

from tlsvect.config import load_config, save_default_config
from tlsvect.tracer import configure_tracer, get_tracer


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="tlsvect: vectorize ordered point clouds into lines and planes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Vectorize a generated shape")
    run_parser.add_argument(
        "--shape", "-s",
        default="hemicycle",
        help="Shape to generate (hemicycle, spikes, spiral, crown)",
    )
    run_parser.add_argument(
        "--points", "-n",
        type=int,
        default=200,
        help="Number of generated points",
    )
    run_parser.add_argument(
        "--noise",
        type=float,
        default=0.0,
        help="Standard deviation of Gaussian noise added to the points",
    )
    run_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the noise",
    )
    run_parser.add_argument(
        "--preset", "-p",
        default=None,
        help="Vectorizer preset, overrides the config file",
    )
    run_parser.add_argument("--sigma", type=float, default=None, help="Max point distance deviation")
    run_parser.add_argument("--delta", type=float, default=None, help="Max intersection gap")
    run_parser.add_argument("--simplex-shift", type=int, default=None, help="Initial simplex shift")
    run_parser.add_argument("--max-iterations", type=int, default=None, help="Simplex iteration cap")
    run_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    run_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print every output shape",
    )
    _add_trace_arguments(run_parser)

    # Benchmark command
    bench_parser = subparsers.add_parser("benchmark", help="Time all presets on all shapes")
    bench_parser.add_argument(
        "--sizes",
        type=int,
        nargs="+",
        default=[100, 1000, 10000],
        help="Point counts to benchmark",
    )
    bench_parser.add_argument(
        "--repeat", "-r",
        type=int,
        default=3,
        help="Runs per measurement",
    )
    bench_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    _add_trace_arguments(bench_parser)

    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="tlsvect_config.yaml",
        help="Output path for config file",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return handle_run(args)
    elif args.command == "benchmark":
        return handle_benchmark(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def _add_trace_arguments(parser):
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )


def _configure_tracing(args, config):
    tracing = config.tracing
    configure_tracer(
        enabled=args.trace or tracing.enabled,
        level=args.trace_level if args.trace else tracing.level,
        file_path=args.trace_file or tracing.file_path,
        json_output=args.trace_json or tracing.json_output,
    )


def _apply_overrides(args, config):
    if args.preset is not None:
        config.preset = args.preset
    if args.sigma is not None:
        config.extraction.sigma = args.sigma
    if args.delta is not None:
        config.continuity.delta = args.delta
    if args.simplex_shift is not None:
        config.total_error.simplex_shift = args.simplex_shift
    if args.max_iterations is not None:
        config.total_error.max_iterations = args.max_iterations
    return config


def handle_run(args):
    """Handle the run command."""
    from tlsvect.models import RunSummary
    from tlsvect.presets import build_vectorizer
    from tlsvect.shapes import SHAPES, generate_shape

    tracer = get_tracer()

    try:
        config = _apply_overrides(args, load_config(args.config))
        _configure_tracing(args, config)

        vectorizer = build_vectorizer(config)
        if args.shape in SHAPES and SHAPES[args.shape].dimension != vectorizer.approximation.DIMENSION:
            raise ValueError(
                f"Preset {config.preset} vectorizes "
                f"{vectorizer.approximation.DIMENSION}D points, shape {args.shape} is "
                f"{SHAPES[args.shape].dimension}D"
            )
        points = generate_shape(args.shape, args.points, noise=args.noise, seed=args.seed)
        vectorizer.set_max_size(len(points))

        tracer.reset_timings()
        with tracer.span("cli_run", module="cli"):
            start = time.perf_counter()
            success = vectorizer(points)
            elapsed = (time.perf_counter() - start) * 1000

        stages = {name: f"{total:.2f}ms" for name, (_, total) in tracer.timings.items() if name != "cli_run"}
        tracer.event("Stage timings", **stages)

        summary = RunSummary(
            preset=config.preset,
            shape=args.shape,
            point_count=len(points),
            primitive_count=len(vectorizer.shapes),
            total_error=vectorizer.total_error,
            elapsed_ms=elapsed,
            success=success,
        )

        if not success:
            print(f"\nVectorization failed: {config.preset} on {args.shape} ({len(points)} points)")
            return 1

        print(f"\nVectorization completed successfully.")
        print(f"  Preset: {summary.preset}")
        print(f"  Shape: {summary.shape} ({summary.point_count} points)")
        print(f"  Primitives: {summary.primitive_count}")
        print(f"  Total error: {summary.total_error:.6g}")
        print(f"  Time: {summary.elapsed_ms:.2f} ms")

        if args.verbose:
            for index_range, shape in zip(vectorizer.indices, vectorizer.shapes):
                print(f"  [{index_range.begin}, {index_range.end}) {shape.model_dump_json()}")

        return 0

    except Exception as e:
        tracer.event(f"Run failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1


def handle_benchmark(args):
    """Handle the benchmark command."""
    from tlsvect.presets import PRESETS
    from tlsvect.shapes import SHAPES, generate_shape

    tracer = get_tracer()

    try:
        config = load_config(args.config)
        _configure_tracing(args, config)
        if args.repeat < 1:
            raise ValueError(f"repeat must be at least 1, got {args.repeat}")

        print(f"{'shape':<10} {'points':>7}  {'preset':<28} {'prims':>6} {'ms':>10}")
        failures = 0
        for shape_name, shape_spec in SHAPES.items():
            for size in args.sizes:
                points = generate_shape(shape_name, size)
                for preset_name, factory in PRESETS.items():
                    vectorizer = factory(config)
                    if vectorizer.approximation.DIMENSION != shape_spec.dimension:
                        continue
                    vectorizer.set_max_size(size)

                    with tracer.span("benchmark", module="cli", shape=shape_name, preset=preset_name):
                        start = time.perf_counter()
                        for _ in range(args.repeat):
                            success = vectorizer(points)
                        elapsed = (time.perf_counter() - start) * 1000 / args.repeat

                    primitives = len(vectorizer.shapes) if success else "fail"
                    failures += 0 if success else 1
                    print(f"{shape_name:<10} {size:>7}  {preset_name:<28} {primitives:>6} {elapsed:>10.3f}")

        return 1 if failures else 0

    except Exception as e:
        tracer.event(f"Benchmark failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
