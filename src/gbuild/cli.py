"""
Command-line interface for gbuild.

This module provides the `gbuild` CLI, which runs the same orchestration a
build script gets from Configuration, for use outside of Cargo.
"""

import argparse
import shlex
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from gbuild.compiler.command import CommandCompiler
from gbuild.configuration import Configuration
from gbuild.errors import ConfigError, GrammarBuildError
from gbuild.output import BuildLog
from gbuild.session import ColorMode, LogLevel
from gbuild.version import __version__

EXIT_OK = 0
EXIT_BUILD_FAILED = 1
EXIT_CONFIG_ERROR = 2


@dataclass
class BuildArgs:
    """Arguments for a gbuild invocation."""

    paths: List[Path] = field(default_factory=list)
    in_dir: Optional[Path] = None
    out_dir: Optional[Path] = None
    in_source_tree: bool = False
    force: bool = False
    rerun_directives: bool = False
    comments: bool = False
    no_whitespace: bool = False
    report: bool = False
    color: ColorMode = ColorMode.IF_INTERACTIVE
    log_level: LogLevel = LogLevel.INFORMATIVE
    macro_recursion_limit: Optional[int] = None
    features: Optional[List[str]] = None
    compiler: Optional[str] = None


def configure(args: BuildArgs) -> Configuration:
    """Translate CLI arguments into a Configuration."""
    config = Configuration()

    if args.color is ColorMode.ALWAYS:
        config.always_use_colors()
    elif args.color is ColorMode.NEVER:
        config.never_use_colors()

    if args.in_source_tree:
        config.generate_in_source_tree()
    if args.in_dir is not None:
        config.set_in_dir(args.in_dir)
    if args.out_dir is not None:
        config.set_out_dir(args.out_dir)

    config.force_build(args.force)
    config.emit_rerun_directives(args.rerun_directives)
    config.emit_comments(args.comments)
    config.emit_whitespace(not args.no_whitespace)
    config.emit_report(args.report)

    if args.log_level is LogLevel.TACITURN:
        config.log_quiet()
    elif args.log_level is LogLevel.VERBOSE:
        config.log_verbose()
    elif args.log_level is LogLevel.DEBUG:
        config.log_debug()

    if args.macro_recursion_limit is not None:
        config.set_macro_recursion_limit(args.macro_recursion_limit)
    if args.features is not None:
        config.set_features(args.features)
    if args.compiler:
        config.set_compiler(CommandCompiler(shlex.split(args.compiler)))

    return config


def build_command(args: BuildArgs) -> int:
    """Run a build and return the process exit code.

    Examples:
        gbuild                              # Process in_dir (default: .) into $OUT_DIR
        gbuild --in-dir src --out-dir gen   # Mirror src/ into gen/
        gbuild --in-source-tree --force     # Regenerate everything next to its grammar
        gbuild src/parser.lalrpop           # Process a single grammar
    """
    build_log = BuildLog(level=args.log_level, color_mode=args.color)
    try:
        config = configure(args)
        if not args.paths:
            config.process()
        for path in args.paths:
            if path.is_dir():
                config.process_dir(path)
            else:
                config.process_file(path)
    except ConfigError as e:
        build_log.log_error(str(e))
        return EXIT_CONFIG_ERROR
    except GrammarBuildError as e:
        build_log.log_error(str(e))
        return EXIT_BUILD_FAILED
    except ValueError as e:
        build_log.log_error(str(e))
        return EXIT_CONFIG_ERROR
    return EXIT_OK


def parse_args(argv: Optional[List[str]] = None) -> BuildArgs:
    """Parse command-line arguments into BuildArgs."""
    parser = argparse.ArgumentParser(
        prog="gbuild",
        description="Regenerate out-of-date parsers from grammar files.",
    )
    parser.add_argument("--version", action="version", version=f"gbuild {__version__}")
    parser.add_argument("paths", nargs="*", type=Path, help="Grammar files or directories (default: the input directory)")
    parser.add_argument("--in-dir", type=Path, help="Directory searched for grammar files (default: .)")
    parser.add_argument("--out-dir", type=Path, help="Directory for generated files (default: $OUT_DIR)")
    parser.add_argument("--in-source-tree", action="store_true", help="Write generated files next to their grammars")
    parser.add_argument("-f", "--force", action="store_true", help="Regenerate even when outputs are up to date")
    parser.add_argument("--rerun-directives", action="store_true", help="Print cargo:rerun-if-changed lines")
    parser.add_argument("--comments", action="store_true", help="Keep comments in generated code")
    parser.add_argument("--no-whitespace", action="store_true", help="Strip redundant whitespace from generated code")
    parser.add_argument("--report", action="store_true", help="Write a .report file per grammar")
    parser.add_argument("--color", choices=[mode.value for mode in ColorMode], default=ColorMode.IF_INTERACTIVE.value)
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only report errors")
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Explain skipped files and timings")
    verbosity.add_argument("--debug", action="store_true", help="Include internal diagnostics")
    parser.add_argument("--macro-recursion-limit", type=int, help="Maximum macro expansion depth (default: 200)")
    parser.add_argument("--features", help="Comma-separated feature list (default: from CARGO_FEATURE_*)")
    parser.add_argument("--compiler", help="Grammar compiler command (default: $GBUILD_COMPILER or lalrpop)")

    ns = parser.parse_args(argv)

    if ns.quiet:
        log_level = LogLevel.TACITURN
    elif ns.verbose:
        log_level = LogLevel.VERBOSE
    elif ns.debug:
        log_level = LogLevel.DEBUG
    else:
        log_level = LogLevel.INFORMATIVE

    features = None
    if ns.features is not None:
        features = [name.strip() for name in ns.features.split(",") if name.strip()]

    return BuildArgs(
        paths=ns.paths,
        in_dir=ns.in_dir,
        out_dir=ns.out_dir,
        in_source_tree=ns.in_source_tree,
        force=ns.force,
        rerun_directives=ns.rerun_directives,
        comments=ns.comments,
        no_whitespace=ns.no_whitespace,
        report=ns.report,
        color=ColorMode(ns.color),
        log_level=log_level,
        macro_recursion_limit=ns.macro_recursion_limit,
        features=features,
        compiler=ns.compiler,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the gbuild console script."""
    return build_command(parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
