#!/usr/bin/env python3
"""
Subset the icon font down to the glyphs the UI actually references.

Steps:
  1. Collect all .slint files under src/.
  2. Extract every icon escape (e.g. "\\u{E700}") into a set of characters.
  3. Subset assets/font/segoeicons.ttf to those characters (hinting removed)
     in a temporary build directory, then publish it as assets/font/icons.ttf.

Run from the repository root:

    python scripts/subset_icon_font.py [--src-dir DIR] [--font FILE] [--output FILE]
"""

import argparse
import logging
import re
import shutil
import sys
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Iterable, List, Optional

import trio

from glyph_subset import FontToolsSubsetter, GlyphSubsetter, SubsetError

# Constants
# ----------------------------------------------------------------------------

SRC_DIR = Path("src")
SOURCE_EXTENSION = ".slint"
FONT_SOURCE = Path("assets/font/segoeicons.ttf")
OUTPUT_DIR = Path("assets/font")
OUTPUT_FILE = "icons.ttf"
TEMP_DIR = Path("build/temp_font")

# Slint string escape for a code point: \u{E700}
ESCAPE_PATTERN = re.compile(r"\\u\{([0-9a-fA-F]+)\}")

MAX_CODE_POINT = 0x10FFFF

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


# Glyph Discovery
# ----------------------------------------------------------------------------


def discover_source_files(root: Path, extension: str = SOURCE_EXTENSION) -> List[Path]:
    """Recursively list the files under ``root`` whose name ends with ``extension``.

    Raises:
        FileNotFoundError: If ``root`` does not exist.
        NotADirectoryError: If ``root`` is not a directory.
    """
    if not root.exists():
        raise FileNotFoundError(f"Source directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Source path is not a directory: {root}")

    return sorted(
        path for path in root.rglob(f"*{extension}") if path.is_file()
    )


def extract_code_points(paths: Iterable[Path]) -> str:
    """Collect the distinct characters referenced by escapes in ``paths``.

    Characters are returned in the order they are first seen.
    """
    seen = {}
    for path in paths:
        # undecodable bytes become U+FFFD
        content = path.read_text(encoding="utf-8", errors="replace")
        found = 0
        for match in ESCAPE_PATTERN.finditer(content):
            value = int(match.group(1), 16)
            if value > MAX_CODE_POINT:
                logger.warning(f"Ignoring out-of-range escape {match.group(0)} in {path}")
                continue
            seen.setdefault(chr(value), None)
            found += 1
        logger.debug(f"  {path}: {found} escape(s)")

    return "".join(seen)


def format_code_points(text: str) -> str:
    """Render characters as a space-separated listing like ``\\uE700 \\uE701``."""
    return " ".join(f"\\u{ord(char):X}" for char in text)


# Publishing
# ----------------------------------------------------------------------------


@dataclass
class SizeReport:
    original_size: int
    new_size: int

    @property
    def reduction(self) -> float:
        """Size reduction as a percentage of the original."""
        if self.original_size == 0:
            return 0.0
        return (1 - self.new_size / self.original_size) * 100

    def log(self) -> None:
        logger.info(f"Original size: {self.original_size / 1024:.2f} KB")
        logger.info(f"New size: {self.new_size / 1024:.2f} KB")
        logger.info(f"Reduction: {self.reduction:.2f}%")


def prepare_temp_dir(temp_dir: Path, generated: Path) -> None:
    """Create ``temp_dir`` if needed and drop a stale ``generated`` file from a previous run.

    Nothing else in ``temp_dir`` is touched.
    """
    temp_dir.mkdir(parents=True, exist_ok=True)
    if generated.exists():
        logger.debug(f"Removing stale subset output: {generated}")
        generated.unlink()


def publish_font(generated: Path, target: Path, temp_dir: Path) -> None:
    """Copy the engine output over ``target`` and remove the temporary artifacts."""
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(generated, target)
    logger.info(f"Successfully generated: {target}")

    generated.unlink()
    if any(temp_dir.iterdir()):
        logger.warning(f"Temp directory not empty, leaving it in place: {temp_dir}")
    else:
        temp_dir.rmdir()


# Main Entry Point
# ----------------------------------------------------------------------------


def _log_traceback() -> None:
    if logger.isEnabledFor(logging.DEBUG):
        import traceback
        traceback.print_exc()


async def run_subset(
    src_dir: Path = SRC_DIR,
    font_source: Path = FONT_SOURCE,
    output_path: Path = OUTPUT_DIR / OUTPUT_FILE,
    temp_dir: Path = TEMP_DIR,
    extension: str = SOURCE_EXTENSION,
    subsetter: Optional[GlyphSubsetter] = None,
) -> int:
    """Run discovery, extraction, subsetting and publishing.

    Returns:
        Process exit code: 0 on success or when no icons are referenced,
        1 on any failure.
    """
    if not font_source.is_file():
        logger.error(f"Source font not found at {font_source}")
        return 1

    logger.info(f"Scanning for {extension} files in: {src_dir}")
    try:
        source_files = discover_source_files(src_dir, extension)
    except OSError as e:
        logger.error(f"Failed to scan source directory: {e}")
        return 1
    logger.info(f"Found {len(source_files)} files.")

    logger.info("Extracting used icons...")
    try:
        text = extract_code_points(source_files)
    except OSError as e:
        logger.error(f"Failed to read source files: {e}")
        _log_traceback()
        return 1
    logger.info(f"Found {len(text)} unique characters: {format_code_points(text)}")

    if not text:
        logger.warning("No icons found! Aborting subsetting to avoid empty font.")
        return 0

    logger.info(f"Subsetting font from {font_source} to {output_path}...")
    if subsetter is None:
        subsetter = FontToolsSubsetter()

    expected = temp_dir / font_source.name
    if expected.resolve() in (font_source.resolve(), output_path.resolve()):
        logger.error(f"Temp directory {temp_dir} would overwrite {expected}; choose another --temp-dir")
        return 1

    try:
        prepare_temp_dir(temp_dir, expected)
    except OSError as e:
        logger.error(f"Failed to prepare temp directory: {e}")
        _log_traceback()
        return 1

    try:
        generated = await trio.to_thread.run_sync(subsetter.subset, font_source, text, temp_dir)
    except (SubsetError, OSError) as e:
        logger.error(f"Error during font subsetting: {e}")
        _log_traceback()
        return 1

    if generated != expected:
        logger.error(f"Subsetting engine wrote {generated}, expected {expected}")
        return 1
    if not generated.is_file():
        logger.error(f"Expected output file not found in temp: {generated}")
        return 1

    try:
        publish_font(generated, output_path, temp_dir)
    except OSError as e:
        logger.error(f"Error moving file: {e}")
        _log_traceback()
        return 1

    SizeReport(font_source.stat().st_size, output_path.stat().st_size).log()
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Subset the icon font to the glyphs referenced by the UI sources."
    )
    parser.add_argument(
        "--src-dir",
        type=Path,
        default=SRC_DIR,
        help=f"Directory scanned for {SOURCE_EXTENSION} files (default: {SRC_DIR})",
    )
    parser.add_argument(
        "--font",
        type=Path,
        default=FONT_SOURCE,
        help=f"Source icon font (default: {FONT_SOURCE})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=OUTPUT_DIR / OUTPUT_FILE,
        help=f"Published subset font (default: {OUTPUT_DIR / OUTPUT_FILE})",
    )
    parser.add_argument(
        "--temp-dir",
        type=Path,
        default=TEMP_DIR,
        help=f"Scratch directory for the subsetting engine (default: {TEMP_DIR})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every scanned file and print tracebacks on failure.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point - runs the async pipeline and exits with its status."""
    args = parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    exit_code = trio.run(
        partial(
            run_subset,
            src_dir=args.src_dir,
            font_source=args.font,
            output_path=args.output,
            temp_dir=args.temp_dir,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
