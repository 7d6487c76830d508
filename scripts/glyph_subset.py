"""
Glyph subsetting engine used by subset_icon_font.py.

The orchestrator only depends on the ``GlyphSubsetter`` interface: given a
source font, a string of characters and a destination directory, write a
reduced font named like the source into that directory. The default
implementation drives fontTools.subset in-process.
"""

import logging
from pathlib import Path

from fontTools import subset

# fontTools.subset is chatty about dropped tables at INFO level
logging.getLogger("fontTools.subset").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


class SubsetError(RuntimeError):
    """Raised when the subsetting engine fails to produce a font."""


class GlyphSubsetter:
    """Interface for engines that reduce a font to a character repertoire."""

    def subset(self, font_path: Path, text: str, dest_dir: Path) -> Path:
        raise NotImplementedError


class FontToolsSubsetter(GlyphSubsetter):
    """Subset a font with fontTools, keeping only glyphs reachable from ``text``.

    Hinting instructions are dropped to keep the output small. OpenType layout
    features are kept so ligature-based icons still resolve.
    """

    def __init__(self, hinting: bool = False) -> None:
        self.hinting = hinting

    def build_options(self) -> subset.Options:
        options = subset.Options()
        options.hinting = self.hinting
        options.layout_features = ["*"]
        options.notdef_outline = True
        return options

    def subset(self, font_path: Path, text: str, dest_dir: Path) -> Path:
        """Write ``dest_dir / font_path.name`` holding only the glyphs for ``text``.

        Args:
            font_path: Source font file.
            text: Characters to keep. Order is irrelevant.
            dest_dir: Existing directory the reduced font is written into.

        Returns:
            Path of the written font.

        Raises:
            SubsetError: If fontTools fails to load, subset or save the font.
        """
        output_path = dest_dir / font_path.name
        options = self.build_options()

        try:
            font = subset.load_font(str(font_path), options)
            try:
                subsetter = subset.Subsetter(options)
                subsetter.populate(text=text)
                subsetter.subset(font)
                subset.save_font(font, str(output_path), options)
            finally:
                font.close()
        except Exception as e:
            raise SubsetError(f"Failed to subset {font_path}: {e}") from e

        logger.debug(f"Wrote subset font: {output_path}")
        return output_path
