"""Command-line interface for tunekit.

Subcommands
-----------
``tunekit info``
    Print version and available components.

``tunekit run <config.yaml>``
    Run a tuning search from a YAML configuration file.

``tunekit resume <meta_state.pkl> <config.yaml> --n N``
    Extend a saved search to a budget of ``N`` models.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from tunekit import __version__
from tunekit.errors import MetaStateError
from tunekit.loggers import LocalFileLogger
from tunekit.runtime.finalizer import load_meta_state
from tunekit.runtime.spec import TuningSpec
from tunekit.runtime.tuned_model import TunedModel
from tunekit.utils.helpers import ensure_dir, timestamp_id
from tunekit.viz.tables import format_report, summary_lines

logger = logging.getLogger(__name__)


# ── Helpers ─────────────────────────────────────────────────────────────


def _load_spec(path: str) -> TuningSpec:
    """Load a TuningSpec, exiting with a message if the file is missing."""
    if not Path(path).exists():
        print(f'Error: config file not found: {path}', file=sys.stderr)
        sys.exit(1)
    return TuningSpec.from_yaml(path)


def _fit(spec: TuningSpec, tuned: TunedModel, verbosity: int) -> None:
    data = spec.load_data()
    tuned.fit(data.X, data.y, data.w, verbosity=verbosity)


def _print_summary(tuned: TunedModel, meta_path: str, top: int) -> None:
    """Pretty-print the tuning report."""
    report = tuned.report
    print(f'\n{"=" * 50}')
    print(format_report(report, top=top))
    lines = summary_lines(report.summary)
    if lines:
        print('\nStrategy summary:')
        print(lines)
    print(f'\n  Meta-state: {meta_path}')
    print(f'{"=" * 50}')


# ── Subcommands ─────────────────────────────────────────────────────────


def cmd_info(_args: argparse.Namespace) -> None:
    """Print version information."""
    from tunekit.models import MODELS
    from tunekit.search.strategies import STRATEGIES
    from tunekit.utils.measures import MEASURES

    print(f'tunekit {__version__}')
    print('Resumable hyperparameter search over pluggable strategies')
    print(f'  models:     {", ".join(sorted(MODELS))}')
    print(f'  strategies: {", ".join(sorted(STRATEGIES))}')
    print(f'  measures:   {", ".join(sorted(MEASURES))}')


def cmd_run(args: argparse.Namespace) -> None:
    """Run a fresh search and save its meta-state."""
    spec = _load_spec(args.config)
    run_dir = ensure_dir(os.path.join(spec.output_dir, f'{spec.name}_{timestamp_id()}'))
    spec.to_yaml(os.path.join(run_dir, 'spec.yaml'))

    tuned = spec.build(exp_logger=LocalFileLogger(run_dir))
    _fit(spec, tuned, args.verbosity)

    meta_path = tuned.save_meta_state(os.path.join(run_dir, 'meta_state.pkl'))
    tuned.exp_logger.finish()
    _print_summary(tuned, meta_path, args.top)


def cmd_resume(args: argparse.Namespace) -> None:
    """Extend a saved search to a larger budget."""
    spec = _load_spec(args.config)
    try:
        meta_state = load_meta_state(args.meta_state)
    except (FileNotFoundError, MetaStateError) as exc:
        print(f'Error: {exc}', file=sys.stderr)
        sys.exit(1)

    if args.n is not None:
        spec.n = args.n
    run_dir = ensure_dir(os.path.dirname(os.path.abspath(args.meta_state)))
    tuned = spec.build(exp_logger=LocalFileLogger(run_dir)).restore(meta_state)
    _fit(spec, tuned, args.verbosity)

    meta_path = tuned.save_meta_state(args.out or args.meta_state)
    tuned.exp_logger.finish()
    _print_summary(tuned, meta_path, args.top)


# ── Main entry point ───────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``tunekit`` CLI."""
    parser = argparse.ArgumentParser(
        prog='tunekit',
        description='tunekit — resumable hyperparameter search.',
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'tunekit {__version__}',
    )
    parser.add_argument(
        '-v',
        '--verbose',
        action='store_true',
        help='Enable verbose (DEBUG) logging.',
    )

    subparsers = parser.add_subparsers(dest='command', help='Available subcommands')

    # info
    sp_info = subparsers.add_parser('info', help='Show version information')
    sp_info.set_defaults(func=cmd_info)

    # run
    sp_run = subparsers.add_parser('run', help='Run a tuning search')
    sp_run.add_argument('config', help='Path to tuning YAML config')
    sp_run.set_defaults(func=cmd_run)

    # resume
    sp_resume = subparsers.add_parser('resume', help='Extend a saved search')
    sp_resume.add_argument('meta_state', help='Path to a saved meta_state.pkl')
    sp_resume.add_argument('config', help='Path to the tuning YAML config of the run')
    sp_resume.add_argument('--n', type=int, default=None, help='New evaluation budget')
    sp_resume.add_argument('--out', default=None, help='Where to save the new meta-state')
    sp_resume.set_defaults(func=cmd_resume)

    for sp in (sp_run, sp_resume):
        sp.add_argument('--verbosity', type=int, default=1, help='Search verbosity level')
        sp.add_argument('--top', type=int, default=10, help='Leaderboard rows to print')

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s %(message)s')

    if hasattr(args, 'func'):
        args.func(args)
    else:
        parser.print_help()


if __name__ == '__main__':
    main()
