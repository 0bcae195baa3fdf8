import argparse
import logging
from pathlib import Path

from .config import MergerSettings
from .errors import SaveMergerError
from .logging_config import configure_logging
from .options import parse_options
from .request import MergeRequest
from .service import MergeService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 2


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="snowmerge",
        description="Merge the progress of two SnowRunner save folders into one save",
    )
    parser.add_argument(
        "--settings",
        dest="settings_path",
        type=Path,
        default=None,
        help="Path to a user settings YAML file to load/override defaults.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    merge = sub.add_parser("merge", help="Merge a stored save into an uploaded one")
    merge.add_argument("incoming", type=Path, help="Folder of the save to merge into")
    merge.add_argument("base", type=Path, help="Folder of the save whose progress is taken")
    merge.add_argument("--incoming-slot", type=int, default=0)
    merge.add_argument("--base-slot", type=int, default=0)
    merge.add_argument("--output-slot", type=int, default=None)
    merge.add_argument(
        "--option",
        dest="options",
        action="append",
        default=None,
        help="Category to merge (repeatable), e.g. map_progress. Defaults come from settings.",
    )
    merge.add_argument(
        "--map",
        dest="maps",
        action="append",
        default=[],
        help="Restrict the merge to a map, e.g. US_01 (repeatable).",
    )
    merge.add_argument("--out", type=Path, required=True, help="Path of the zip archive to write")

    maps = sub.add_parser("maps", help="List the maps a save has discovered")
    maps.add_argument("save", type=Path)
    maps.add_argument("--slot", type=int, default=0)

    check = sub.add_parser("check", help="Check that a save folder is complete")
    check.add_argument("save", type=Path)
    check.add_argument("--slot", type=int, default=0)
    return parser.parse_args(argv)


def _run(args, settings: MergerSettings) -> int:
    service = MergeService(settings)
    if args.command == "merge":
        request = MergeRequest(
            incoming_slot=args.incoming_slot,
            base_slot=args.base_slot,
            output_slot=settings.merge.default_output_slot if args.output_slot is None else args.output_slot,
            options=parse_options(args.options) if args.options else settings.default_options,
            map_scope=args.maps,
        )
        outcome = service.merge(request, args.incoming, args.base)
        outcome.bundle.write_zip(args.out)
        print(f"Wrote {args.out} ({len(outcome.bundle.files)} files)")
    elif args.command == "maps":
        for map_id in sorted(service.describe(args.save, args.slot)):
            print(map_id)
    elif args.command == "check":
        service.open(args.save, args.slot)
        print(f"{args.save} slot {args.slot}: OK")
    return EXIT_OK


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = MergerSettings.load(user_path=args.settings_path)
    configure_logging(default_level=logging.DEBUG if args.debug else settings.log_level)
    try:
        return _run(args, settings)
    except (SaveMergerError, ValueError) as exc:
        logger.error("%s", exc)
        return EXIT_REJECTED
