#!/usr/bin/env python3
"""
Page-Load Trace Analyzer - Command Line Interface
"""

import json
import logging
import sys

from pageload_analyzer import PageLoadAnalyzer
from pageload_analyzer.core.errors import AnalysisError
from pageload_analyzer.core.profiles import ENGINE_PROFILES
from pageload_analyzer.formatters import export_combined_trace
from pageload_analyzer.logging_config import setup_logger


def print_summaries(summaries):
    print(summaries.to_json())
    print()
    print(summaries.to_text(), end='')


def run_files(args):
    analyzer = PageLoadAnalyzer(
        engine=args.engine,
        url=args.url,
        num_workers=args.workers,
    )
    print_summaries(analyzer.compute_summaries(args.files))


def run_directory(args):
    analyzer = PageLoadAnalyzer(
        engine=args.engine,
        url=args.url,
        num_workers=args.workers,
        traceconv_command=args.traceconv,
    )
    print_summaries(analyzer.analyse_directory(args.sample_dir))


def run_combined(args):
    analyses = []
    for index, (engine, url, *files) in enumerate(args.analyses):
        if not files:
            raise ValueError(f"Analysis {index} ({engine}) names no sample files")
        analyzer = PageLoadAnalyzer(engine=engine, url=url, num_workers=args.workers)
        analysis = analyzer.analyse_files(files)
        analyses.append((f"{engine} {index}", analysis.samples))
    print(json.dumps(export_combined_trace(analyses)))


def build_parser():
    import argparse
    parser = argparse.ArgumentParser(
        description='Analyze browser page-load traces and summarize rendering timings.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python analyze_trace.py chromium https://example.org/ chrome1.json chrome2.json
  python analyze_trace.py servo https://example.org/ servo1.html servo2.html
  python analyze_trace.py servo-combined https://example.org/ manifest1.json manifest2.json
  python analyze_trace.py directory samples/cpu/site/chromium --engine chromium --url https://example.org/
  python analyze_trace.py combined --analysis chromium https://example.org/ chrome1.json \\
                                   --analysis servo https://example.org/ servo1.html
        """
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--workers', type=int, default=None,
                        help='Worker processes (default: CPU count)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    for command, engine, help_text in (
        ('chromium', 'chromium', 'Summarize Chromium JSON traces'),
        ('servo', 'servo', 'Summarize Servo HTML or Perfetto traces'),
        ('servo-combined', 'servo', 'Summarize Servo runs given as HTML + Perfetto manifests'),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument('url', help='URL of the measured page')
        sub.add_argument('files', nargs='+', help='Sample files')
        sub.set_defaults(handler=run_files, engine=engine)

    directory = subparsers.add_parser(
        'directory', help='Analyze a sample directory and write summaries.json and summaries.txt'
    )
    directory.add_argument('sample_dir', help='Directory of sample files')
    directory.add_argument('--engine', required=True, choices=sorted(ENGINE_PROFILES))
    directory.add_argument('--url', required=True, help='URL of the measured page')
    directory.add_argument('--traceconv', nargs='+', default=None,
                           help='Command converting *.pftrace to *.json (default: traceconv)')
    directory.set_defaults(handler=run_directory)

    combined = subparsers.add_parser(
        'combined', help='Print one Chrome JSON trace laying out several analyses side by side'
    )
    combined.add_argument('--analysis', dest='analyses', action='append', nargs='+', required=True,
                          metavar='ENGINE URL FILE',
                          help='Engine, page URL and sample files of one analysis (repeatable)')
    combined.set_defaults(handler=run_combined)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logger(logging.DEBUG if args.verbose else logging.INFO)

    if args.command == 'combined':
        for spec in args.analyses:
            if len(spec) < 2:
                parser.error('--analysis needs an engine, a URL and sample files')

    try:
        args.handler(args)
    except FileNotFoundError as e:
        print(f"Error: File '{e.filename}' not found.", file=sys.stderr)
        sys.exit(1)
    except (AnalysisError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
