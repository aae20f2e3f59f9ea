#!python3
import argparse
import json
import logging
import urllib.request
from pathlib import Path
from typing import Dict, List, Tuple

from tqdm import tqdm

from pack import encode_icon, write_library
from svg_cleanup import normalize_svg
from utils import Config, IconGroup, IconSource, group_title, setup_logging

USER_AGENT = "drawio-icon-library/1.0"
METADATA_PREFIX = ")]}'"
DEFAULT_HOST = "fonts.gstatic.com"
ICON_EXTENSION = ".svg"


def fetch(url: str) -> bytes:
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    with urllib.request.urlopen(req) as response:
        return response.read()


def local_groups(config: Config) -> List[IconGroup]:
    """One group per subdirectory of config.source, holding its SVG files."""
    directories = sorted(
        (d for d in config.source.iterdir() if d.is_dir()),
        key=lambda d: d.name.lower(),
    )

    groups = []
    for directory in directories:
        files = sorted(
            (
                f
                for f in directory.iterdir()
                if f.is_file() and f.suffix.lower() == ICON_EXTENSION
            ),
            key=lambda f: f.name.lower(),
        )
        icons = tuple(IconSource(name=f.stem, data=f.read_bytes()) for f in files)
        groups.append(IconGroup(title=group_title(config.namespace, directory.name), icons=icons))
        logging.debug(f"Found {len(icons)} icons in {directory}")
    return groups


def fetch_metadata(config: Config) -> dict:
    """
    Download the icon catalog metadata. The response starts with a fixed
    anti-JSON-hijacking prefix which must be removed before parsing.

    Fetch and parse errors propagate and abort the run.
    """
    text = fetch(config.metadata_url).decode("utf-8")
    if text.startswith(METADATA_PREFIX):
        text = text[len(METADATA_PREFIX) :]
    return json.loads(text)


def remote_groups(metadata: dict, config: Config) -> List[Tuple[str, List[dict]]]:
    """Group supported catalog entries by their first category, ignoring case."""
    grouped: Dict[str, Tuple[str, List[dict]]] = {}
    unsupported = 0
    uncategorized = 0

    for entry in metadata["icons"]:
        if config.family in entry.get("unsupported_families", []):
            unsupported += 1
            continue
        categories = entry.get("categories") or []
        if not categories:
            logging.debug(f"Icon {entry['name']} has no category")
            uncategorized += 1
            continue
        category = categories[0]
        grouped.setdefault(category.lower(), (category, []))[1].append(entry)

    if unsupported:
        logging.info(f"Skipped {unsupported} catalog entries not available in {config.family}.")
    if uncategorized:
        logging.info(f"Skipped {uncategorized} catalog entries without a category.")

    return [
        (
            group_title(config.remote_namespace, category),
            sorted(entries, key=lambda e: e["name"].lower()),
        )
        for _, (category, entries) in sorted(grouped.items())
    ]


def variant_name(name: str, variant: str, config: Config) -> str:
    suffix = variant[len(config.family) :] if variant.startswith(config.family) else variant
    suffix = "-".join(suffix.lower().split())
    return f"{name}-{suffix}" if suffix else name


def icon_url(host: str, variant: str, entry: dict) -> str:
    family_id = "".join(variant.lower().split())
    return f"https://{host}/s/i/{family_id}/{entry['name']}/v{entry['version']}/24px.svg"


def fetch_group(title: str, entries: List[dict], metadata: dict, config: Config) -> IconGroup:
    """Download every style variant of the entries, one request each."""
    host = metadata.get("host") or DEFAULT_HOST
    to_download = [
        (entry, variant)
        for entry in entries
        for variant in config.variants
        if variant not in entry.get("unsupported_families", [])
    ]

    icons = []
    for entry, variant in tqdm(to_download, desc=f"Downloading {title}", unit=" files", leave=False):
        icons.append(
            IconSource(
                name=variant_name(entry["name"], variant, config),
                data=fetch(icon_url(host, variant, entry)),
            )
        )
    return IconGroup(title=title, icons=tuple(icons))


def build_group(group: IconGroup, config: Config) -> Path:
    descriptors = [encode_icon(normalize_svg(icon.data, icon.name)) for icon in group.icons]
    output = config.library_path(group.title)
    write_library(output, group.title, descriptors)
    return output


def run(config: Config, remote: bool = False) -> List[Path]:
    written = []
    if remote:
        metadata = fetch_metadata(config)
        groups = remote_groups(metadata, config)
        for title, entries in tqdm(groups, desc="Building libraries", unit=" groups"):
            written.append(build_group(fetch_group(title, entries, metadata, config), config))
    else:
        for group in tqdm(local_groups(config), desc="Building libraries", unit=" groups"):
            written.append(build_group(group, config))

    logging.info(f"Icon libraries written: {len(written)}")
    return written


def main(args):
    config = Config(
        source=args.source,
        output=args.output,
        namespace=args.namespace,
    )
    run(config, remote=args.remote)


def cli():
    parser = argparse.ArgumentParser(
        description="Convert icon SVGs into draw.io icon libraries, one per group."
    )
    parser.add_argument(
        "--source",
        type=Path,
        default=Config.source,
        help="Directory whose subdirectories are icon groups",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Config.output,
        help="Directory to write the .drawio libraries to",
    )
    parser.add_argument(
        "--namespace",
        default=Config.namespace,
        help="Prefix of the library titles for local icons",
    )
    parser.add_argument(
        "--remote",
        action="store_true",
        help="Build from the Material Icons catalog instead of --source",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    setup_logging()
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    main(args)


if __name__ == "__main__":
    cli()
