from __future__ import annotations

from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from fontTools.ttLib import newTable
from fontTools.ttLib.tables import ttProgram

# Private-use code points, as used by Segoe-style icon fonts
ICON_CODE_POINTS = [0xE700, 0xE701, 0xE702, 0xE703, 0xE704, 0xE705]


def _star_glyph(points: int, radius: int):
    """Draw a jagged closed contour so every glyph carries real outline data."""
    pen = TTGlyphPen(None)
    for i in range(points):
        r = radius if i % 2 == 0 else radius // 2
        x = 500 + (r * ((i * 37) % 100 - 50)) // 50
        y = 400 + (r * ((i * 61) % 100 - 50)) // 50
        if i == 0:
            pen.moveTo((x, y))
        else:
            pen.lineTo((x, y))
    pen.closePath()
    return pen.glyph()


def _hinting_program():
    program = ttProgram.Program()
    program.fromBytecode(b"\x00" * 64)
    return program


def build_icon_font(path: Path) -> Path:
    names = [f"uni{cp:04X}" for cp in ICON_CODE_POINTS]
    glyph_order = [".notdef"] + names

    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(dict(zip(ICON_CODE_POINTS, names)))

    glyphs = {".notdef": _star_glyph(4, 300)}
    for index, name in enumerate(names):
        glyphs[name] = _star_glyph(24 + index * 4, 350)
    fb.setupGlyf(glyphs)

    fb.setupHorizontalMetrics({name: (1000, 0) for name in glyph_order})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": "Test Icons", "styleName": "Regular"})
    fb.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    fb.setupPost()

    for tag in ("fpgm", "prep"):
        table = newTable(tag)
        table.program = _hinting_program()
        fb.font[tag] = table

    fb.save(str(path))
    return path


@pytest.fixture
def icon_font(tmp_path: Path) -> Path:
    font_dir = tmp_path / "assets" / "font"
    font_dir.mkdir(parents=True)
    return build_icon_font(font_dir / "segoeicons.ttf")


@pytest.fixture
def ui_tree(tmp_path: Path) -> Path:
    src = tmp_path / "src"
    (src / "ui" / "widgets").mkdir(parents=True)
    (src / "ui" / "main.slint").write_text(
        'Text { text: "\\u{E700}"; }\nText { text: "\\u{e702}"; }\n',
        encoding="utf-8",
    )
    (src / "ui" / "widgets" / "button.slint").write_text(
        'Button { icon-text: "\\u{E702}"; }\n',
        encoding="utf-8",
    )
    (src / "app.rs").write_text('let s = "\\u{E705}";\n', encoding="utf-8")
    return src
