"""Command line entry point: decode a morph target export and dump it as JSON."""

import argparse
import logging
import sys

from morphforge.core.config_loader import load_version_profile, load_version_profiles
from morphforge.core.versions import Game
from morphforge.export.json_exporter import export_json, morph_target_to_json
from morphforge.loaders.morph_target import AssetDecodeError, load_morph_target_file

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="morphforge-dump",
        description="Decode a serialized morph target export and print it as JSON")
    parser.add_argument("input", help="File holding the serialized export body")
    parser.add_argument("--profile", required=True,
                        help="Version profile name from version_profiles.json")
    parser.add_argument("--game", choices=[g.value for g in Game],
                        help="Override the profile's game variant")
    parser.add_argument("--offset", type=int, default=0,
                        help="Byte offset of the export inside the file")
    parser.add_argument("--end", type=int, default=None,
                        help="Byte offset where the export region ends")
    parser.add_argument("--output", "-o", help="Write JSON here instead of stdout")
    parser.add_argument("--indent", type=int, default=2)
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    profiles = load_version_profiles()
    if args.profile not in profiles:
        parser.error(f"Unknown profile: {args.profile!r}. Choices: {', '.join(sorted(profiles))}")
    versions = load_version_profile(args.profile)
    if args.game:
        versions = versions.with_game(Game(args.game))

    try:
        asset = load_morph_target_file(args.input, versions, offset=args.offset, end=args.end)
    except (AssetDecodeError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.output:
        export_json(asset, args.output, indent=args.indent)
    else:
        print(morph_target_to_json(asset, indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
