#!/usr/bin/env python3
"""
Compare the six MaxSAT heuristics over a set of CNF instances.

Usage:
    maxsat-bench instances/*.cnf
    maxsat-bench ./uf50/ --repetitions 10 --workers 4 --output results.json
    maxsat-bench ./uf50/uf50-01.cnf --info

Each instance is run --repetitions times; every row of the table shows
mean(std digit) of the cost and of the wall-clock time per strategy.
"""

import argparse
import sys
import time

from .config import STRATEGY_NAMES, SearchParams
from .dimacs_loader import DimacsError, parse_dimacs_cnf, print_benchmark_info
from .experiment import collect_paths, run_benchmark
from .report import format_row, plot_costs, print_footer, print_header, save_json


def print_banner():
    print("\n" + "╔" + "═" * 78 + "╗")
    print("║" + "🔍 MAXSAT HEURISTICS BENCHMARK".center(77) + "║")
    print("║" + ", ".join(STRATEGY_NAMES.values()).center(78) + "║")
    print("╚" + "═" * 78 + "╝\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the MaxSAT heuristics on DIMACS CNF instances",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        'paths',
        nargs='+',
        help='.cnf files or folders containing them'
    )

    parser.add_argument(
        '--repetitions',
        type=int,
        default=30,
        help='Repetitions per instance (default: 30)'
    )

    parser.add_argument(
        '--workers',
        type=int,
        default=None,
        help='Parallel instances (default: CPU count)'
    )

    parser.add_argument(
        '--ils-iterations',
        type=int,
        default=20,
        help='ILS perturbation rounds (default: 20)'
    )

    parser.add_argument(
        '--tabu-iterations',
        type=int,
        default=100,
        help='Tabu search iterations (default: 100)'
    )

    parser.add_argument(
        '--tabu-tenure',
        type=int,
        default=None,
        help='Base tabu tenure (default: 7 + variables / 10)'
    )

    parser.add_argument(
        '--sa-temperature',
        type=float,
        default=10.0,
        help='Initial annealing temperature (default: 10.0)'
    )

    parser.add_argument(
        '--sa-alpha',
        type=float,
        default=0.98,
        help='Geometric cooling factor (default: 0.98)'
    )

    parser.add_argument(
        '--sa-iterations',
        type=int,
        default=100,
        help='Iterations per temperature level (default: 100)'
    )

    parser.add_argument(
        '--sa-min-temperature',
        type=float,
        default=0.01,
        help='Stopping temperature (default: 0.01)'
    )

    parser.add_argument(
        '--grasp-iterations',
        type=int,
        default=20,
        help='GRASP trials (default: 20)'
    )

    parser.add_argument(
        '--grasp-alpha',
        type=float,
        default=0.2,
        help='RCL greediness, 0 = greedy, 1 = random (default: 0.2)'
    )

    parser.add_argument(
        '--info',
        action='store_true',
        help='Only print information about the instances'
    )

    parser.add_argument(
        '--output',
        help='Save all samples to JSON'
    )

    parser.add_argument(
        '--plot',
        help='Save a cost box-plot (png, pdf, svg)'
    )

    parser.add_argument(
        '--quiet',
        action='store_true',
        help='No banner'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Print the progress of every strategy'
    )

    return parser


def params_from_args(args) -> SearchParams:
    return SearchParams(
        repetitions=args.repetitions,
        ils_iterations=args.ils_iterations,
        tabu_iterations=args.tabu_iterations,
        tabu_tenure=args.tabu_tenure,
        sa_initial_temperature=args.sa_temperature,
        sa_alpha=args.sa_alpha,
        sa_iterations_per_temperature=args.sa_iterations,
        sa_min_temperature=args.sa_min_temperature,
        grasp_iterations=args.grasp_iterations,
        grasp_alpha=args.grasp_alpha,
    )


def show_info(paths) -> int:
    print(f"\n📋 Information about {len(paths)} {'file' if len(paths) == 1 else 'files'}:\n")
    for filepath in paths:
        try:
            print_benchmark_info(parse_dimacs_cnf(filepath))
        except (DimacsError, OSError) as e:
            print(f"❌ Error reading {filepath}: {e}")
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        params = params_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be >= 1")

    try:
        paths = collect_paths(args.paths)
    except FileNotFoundError as e:
        print(f"❌ {e}")
        return 1
    if not paths:
        print(f"❌ No .cnf files in {', '.join(args.paths)}")
        return 1

    if args.info:
        return show_info(paths)

    if not args.quiet:
        print_banner()
        print(f"📁 Instances: {len(paths)}, repetitions: {params.repetitions}")
        print()

    print_header(params.repetitions)

    def on_skip(item):
        print(f"❌ Skipped {item.path}: {item.reason}")

    total_start = time.time()
    reports, skipped = run_benchmark(
        paths, params,
        workers=args.workers,
        on_report=lambda report: print(format_row(report), flush=True),
        on_skip=on_skip,
        verbose=args.verbose,
    )
    print_footer()

    if not args.quiet:
        print(f"\n📊 Done: {len(reports)} instances, {len(skipped)} skipped, "
              f"{time.time() - total_start:.2f}s total")

    if args.output:
        save_json(reports, args.output, args=vars(args), skipped=skipped)
        print(f"💾 Results saved to {args.output}")

    if args.plot and reports:
        plot_costs(reports, args.plot)
        print(f"🖼️ Plot saved to {args.plot}")

    return 0 if reports or not skipped else 1


if __name__ == "__main__":
    sys.exit(main())
