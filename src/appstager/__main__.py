"""Entry point for appstager."""

import argparse
import logging
import sys
import tempfile
import traceback
from pathlib import Path

from appstager.builder.package import PackageBuilder
from appstager.config.loader import load_config
from appstager.config.models import BuildArguments, PackKind
from appstager.errors import AppStagerError
from appstager.templates.newfiles import NewKind, create_new_files

logger = logging.getLogger("appstager")


def default_temp_root() -> Path:
    """Shared temporary namespace for pack roots."""
    return Path(tempfile.gettempdir()) / "appstager"


def _parse_kind(text: str) -> PackKind:
    try:
        return PackKind.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="appstager",
        description="Stage a published application and build an installer package.",
    )
    parser.add_argument("config", nargs="?", help="Path to the .appstager.json configuration")
    parser.add_argument("-k", "--kind", type=_parse_kind, help="Package kind, e.g. deb, rpm, appimage")
    parser.add_argument("-r", "--runtime", default="linux-x64", help="Runtime identifier")
    parser.add_argument("-c", "--build", default="Release", help="Build target name")
    parser.add_argument("--arch", help="Override the target architecture")
    parser.add_argument("-o", "--output", help="Output file name or path")
    parser.add_argument("--publish-dir", help="Published application tree to stage")
    parser.add_argument("--temp-root", help="Directory holding pack roots")
    parser.add_argument("--keep", action="store_true", help="Do not remove an existing pack root")
    parser.add_argument(
        "--new",
        choices=[k.value for k in NewKind],
        help="Create starter files instead of building",
    )
    parser.add_argument("--dir", default=".", help="Directory for --new files")
    parser.add_argument("--name", default="app", help="Base name for --new files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", help="Also write the log to this file")
    return parser


def _configure_logging(verbose: bool, log_file: str | None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def run(args: argparse.Namespace) -> int:
    if args.new:
        create_new_files(NewKind(args.new), args.dir, args.name)
        return 0

    if not args.config or args.kind is None:
        logger.error("A configuration file and --kind are required")
        return 2

    config = load_config(args.config)
    arguments = BuildArguments(
        kind=args.kind,
        runtime=args.runtime,
        build=args.build,
        arch=args.arch,
        output=args.output,
    )
    temp_root = Path(args.temp_root).resolve() if args.temp_root else default_temp_root()

    builder = PackageBuilder(config, arguments, temp_root=temp_root)
    logger.info("Building %s for %s in %s", arguments.kind.value,
                builder.context.build_arch, builder.context.pack_root)

    if not args.keep:
        builder.clean()
    builder.stage(args.publish_dir)
    output = builder.build_package()
    logger.info("Package: %s", output)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run one build."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose, args.log_file)

    try:
        return run(args)
    except (AppStagerError, FileExistsError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:
        logger.critical("Fatal error:\n%s", traceback.format_exc())
        raise


if __name__ == "__main__":
    sys.exit(main())
