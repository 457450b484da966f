import logging

import numpy as np
import pytest
from pytest import raises

from msdftext import ConfigurationError
from msdftext.text import (
    Font,
    LayoutOptions,
    TextLayout,
    layout,
    monospace,
    get_fallback_glyphs,
    make_glyph_measure,
)


def positions(result):
    return [g.position for g in result.glyphs]


def xs(result):
    return [g.position[0] for g in result.glyphs]


def test_layout_single_glyph(font):
    result = layout("A", font)

    assert result.lines_total == 1
    assert len(result.glyphs) == 1
    g = result.glyphs[0]
    assert g.glyph.id == ord("A")
    assert g.source_index == 0
    assert g.visible

    # Height is line_height * nlines - descender, and the pen starts at -height
    assert result.height == 30
    assert g.position == (0, -30)

    # The width includes the xoffset of the last glyph
    assert result.width == 19


def test_layout_metrics(font):
    result = layout("Hax", font)

    assert result.line_height == 40
    assert result.baseline == 30
    assert result.descender == 10
    assert result.x_height == 14
    assert result.cap_height == 22
    assert result.ascender == 40 - 10 - 14

    metrics = result.metrics
    assert metrics["height"] == result.height
    assert metrics["lines_total"] == 1
    assert metrics["letters_total"] == 3
    with raises(TypeError):
        metrics["height"] = 3
    # Hashable
    assert hash(metrics) == hash(layout("Hax", font).metrics)


@pytest.mark.parametrize(
    "text", ["a", "a\nb", "aaa aaa aaa", "a\n\n\nb", "AB\nab cd\n"]
)
def test_layout_height_and_line_positions(font, text):
    result = layout(text, font, width=75)
    lh = result.line_height
    assert result.height == lh * result.lines_total - result.descender

    # Each line moves down by line_height, starting at -height
    for g in result.glyphs:
        assert g.position[1] == -result.height + g.line_index * lh


def test_layout_empty(font):
    for text in ("", None):
        result = layout(text, font)
        assert result.glyphs == ()
        assert result.visible_glyphs == ()
        assert result.lines_total == 0
        assert result.height == 0
        assert result.width == 0
        assert result.words_total == 0
        assert result.letters_total == 0


def test_layout_wrapping(font):
    result = layout("aaa aaa aaa", font, width=75)

    assert result.lines_total == 2
    assert [(line.start, line.end) for line in result.lines] == [(0, 7), (8, 11)]
    assert [line.width for line in result.lines] == [70, 30]

    # The block is at least as wide as the given width
    assert result.width == 75
    assert result.height == 2 * 40 - 10

    line_indices = [g.line_index for g in result.glyphs]
    assert line_indices == [0] * 7 + [1] * 3
    assert all(g.line_total == 2 for g in result.glyphs)

    # A word that does not fit is broken up
    result = layout("aaaaaaaaaa", font, width=35)
    assert result.lines_total == 4
    assert result.width == 35

    # A glyph that does not fit at all still gets a line, and widens the block
    result = layout("A", font, width=10)
    assert result.lines_total == 1
    assert len(result.glyphs) == 1
    assert result.width == 19


def test_layout_no_width(font):
    result = layout("aaa aaa aaa", font)
    assert result.lines_total == 1
    assert result.width == 110
    # Zero is the same as no width
    result = layout("aaa aaa aaa", font, width=0)
    assert result.lines_total == 1
    assert result.width == 110


def test_layout_modes(font):
    text = "aaa aaa\naaa"
    assert layout(text, font, width=35).lines_total == 3
    assert layout(text, font, width=35, mode="pre").lines_total == 2
    assert layout(text, font, width=35, mode="nowrap").lines_total == 2

    # In pre mode, lines wider than the width keep all their glyphs
    result = layout(text, font, width=35, mode="pre")
    assert len(result.glyphs) == len(text) - 1
    result = layout("aaaaaa", font, width=25, mode="pre")
    assert [(line.start, line.end) for line in result.lines] == [(0, 6)]
    assert len(result.glyphs) == 6
    assert xs(result) == [0, 10, 20, 30, 40, 50]
    assert result.width == 60


def test_layout_numpy_scalars(font):
    result = layout(
        "aaa aaa aaa",
        font,
        width=np.float32(75),
        letter_spacing=np.int64(0),
        tab_size=np.float64(4),
        line_height=np.float32(1),
    )
    assert result.lines_total == 2
    assert result.width == 75
    assert isinstance(LayoutOptions("a", font, width=np.float32(30)).width, float)


def test_layout_counters(font):
    result = layout("ab cd", font)

    assert [g.source_index for g in result.glyphs] == [0, 1, 2, 3, 4]
    assert xs(result) == [0, 10, 20, 30, 40]
    assert [g.global_letter_index for g in result.glyphs] == [0, 1, 2, 2, 3]
    assert [g.global_word_index for g in result.glyphs] == [0, 0, 0, 1, 1]
    assert [g.line_letter_index for g in result.glyphs] == [0, 1, 2, 2, 3]
    assert [g.line_word_index for g in result.glyphs] == [0, 0, 0, 1, 1]

    assert result.words_total == 2
    assert result.letters_total == 4
    for g in result.glyphs:
        assert g.line_word_total == 2
        assert g.line_letter_total == 4
        assert g.global_word_total == 2
        assert g.global_letter_total == 4

    # The space is positioned, but produces no geometry
    assert len(result.visible_glyphs) == 4
    assert not result.glyphs[2].visible


def test_layout_counters_multiline(font):
    result = layout("ab cd\nef", font)
    assert result.lines_total == 2
    assert [g.global_word_index for g in result.glyphs] == [0, 0, 0, 1, 1, 1, 1]
    assert [g.line_word_index for g in result.glyphs] == [0, 0, 0, 1, 1, 0, 0]
    assert [g.global_letter_index for g in result.glyphs] == [0, 1, 2, 2, 3, 4, 5]
    assert [g.line_letter_index for g in result.glyphs] == [0, 1, 2, 2, 3, 0, 1]
    assert [g.line_word_total for g in result.glyphs] == [2] * 5 + [1] * 2
    assert result.letters_total == 6


def test_layout_spaces_only(font):
    result = layout("   ", font, mode="pre")
    assert result.lines_total == 1
    assert len(result.glyphs) == 3
    assert len(result.visible_glyphs) == 0
    assert result.letters_total == 0
    # Totals follow the split-on-space convention
    assert result.words_total == 4
    assert all(g.line_word_total == 0 for g in result.glyphs)

    # Leading whitespace is not wrapped onto a line
    result = layout("   ", font)
    assert result.lines_total == 1
    assert len(result.glyphs) == 0


def test_layout_kerning_and_letter_spacing(font):
    result = layout("AB", font)
    assert xs(result) == [0, 20 - 5]

    result = layout("BA", font)
    assert xs(result) == [0, 18]

    result = layout("AB", font, letter_spacing=2)
    assert xs(result) == [0, 20 + 2 - 5]

    result = layout("abc", font, letter_spacing=3)
    assert xs(result) == [0, 13, 26]


def test_layout_align(font):
    text = "aaaaaaaaaa\naaaaaa"

    result = layout(text, font)
    assert result.width == 100
    assert [g.position[0] for g in result.glyphs if g.line_index == 1][0] == 0

    result = layout(text, font, align="right")
    assert [g.position[0] for g in result.glyphs if g.line_index == 0][0] == 0
    assert [g.position[0] for g in result.glyphs if g.line_index == 1][0] == 40

    result = layout(text, font, align="center")
    assert [g.position[0] for g in result.glyphs if g.line_index == 1][0] == 20

    # Align within the minimum width
    assert xs(layout("aa", font, width=100, align="right")) == [80, 90]
    assert xs(layout("aa", font, width=100, align="center")) == [40, 50]
    assert xs(layout("aa", font, width=100, align="LEFT")) == [0, 10]


def test_layout_tab(font):
    result = layout("a\tb", font)
    assert len(result.glyphs) == 3
    assert len(result.visible_glyphs) == 2
    assert xs(result) == [0, 10, 14]

    result = layout("a\tb", font, tab_size=20)
    assert xs(result) == [0, 10, 30]

    # A tab size of zero gives a tab without advance
    result = layout("a\tb", font, tab_size=0)
    assert xs(result) == [0, 10, 10]


def test_fallback_glyphs(font_data):
    font = Font.from_dict(font_data)
    space, tab = get_fallback_glyphs(font, 8)
    assert space.id == 32
    assert tab.id == ord("\t")
    assert tab.area == 0
    assert tab.xadvance == 8

    # Without a space, the 'm' is used
    font_data["chars"] = [c for c in font_data["chars"] if c["id"] != 32]
    font = Font.from_dict(font_data)
    space, tab = get_fallback_glyphs(font, 8)
    assert space.id == ord("m")
    assert xs(layout("a b", font)) == [0, 10, 20]

    # Without 'm' and 'w', the first char is used
    font_data["chars"] = [c for c in font_data["chars"] if c["id"] not in (109, 119)]
    font = Font.from_dict(font_data)
    space, tab = get_fallback_glyphs(font, 8)
    assert space.id == ord("A")
    assert xs(layout("a b", font)) == [0, 10, 30]


def test_layout_unmapped_chars_are_skipped(font, caplog):
    with caplog.at_level(logging.DEBUG, logger="msdftext"):
        result = layout("a€b", font)

    assert [g.source_index for g in result.glyphs] == [0, 2]
    assert xs(result) == [0, 10]
    assert "€" in caplog.text


def test_layout_line_height(font):
    # Factors below one are raised to one
    assert layout("a\nb", font, line_height=0.5).line_height == 40

    result = layout("a\nb", font, line_height=2)
    assert result.line_height == 80
    assert result.descender == 50
    assert result.height == 160 - 50
    assert [g.position[1] for g in result.glyphs] == [-110, -30]


def test_layout_custom_measure(font):
    result = layout("ab cd", font, width=3, measure=monospace)
    assert [(line.start, line.end) for line in result.lines] == [(0, 2), (3, 5)]
    assert result.width == 3


def test_glyph_measure(font):
    get_glyph = font.get_char
    measure = make_glyph_measure(font, get_glyph)

    line = measure("aaa", 0, 3, 1000)
    assert (line.start, line.end, line.width) == (0, 3, 30)

    # Stops when the next advance reaches the width
    line = measure("aaa", 0, 3, 25)
    assert (line.start, line.end, line.width) == (0, 2, 20)

    # The xoffset of the last glyph is included
    line = measure("AB", 0, 2, 1000)
    assert line.width == 20 - 5 + 16 + 2

    # Letter spacing
    measure = make_glyph_measure(font, get_glyph, 5)
    line = measure("aaa", 0, 3, 1000)
    assert line.end == 3
    assert line.width == 30 + 10


def test_layout_font_as_dict(font_data):
    result = layout("ab", font_data)
    assert len(result.glyphs) == 2


def test_layout_invalid_config(font):
    with raises(ConfigurationError):
        layout("a", None)
    with raises(ConfigurationError):
        layout("a")
    with raises(ConfigurationError):
        layout("a", 3)
    with raises(ConfigurationError):
        layout("a", {})
    # A configuration error is a ValueError
    with raises(ValueError):
        layout("a", {"chars": []})


def test_layout_invalid_options(font):
    with raises(TypeError):
        layout(3, font)
    with raises(TypeError):
        layout("a", font, width="100")
    with raises(ValueError):
        layout("a", font, width=-1)
    with raises(TypeError):
        layout("a", font, align=3)
    with raises(ValueError):
        layout("a", font, align="justify")
    with raises(ValueError):
        layout("a", font, mode="justify")
    with raises(TypeError):
        layout("a", font, measure=3)
    with raises(TypeError):
        layout("a", font, foo=3)
    with raises(TypeError):
        layout(LayoutOptions("a", font), font)


def test_layout_options(font):
    options = LayoutOptions("hello", font, width=50, align="Center")
    assert options.text == "hello"
    assert options.font is font
    assert options.width == 50
    assert options.align == "center"
    assert options.letter_spacing == 0
    assert options.tab_size == 4
    assert options.line_height == 1
    assert options.mode == "greedy"
    assert options.measure is None

    options2 = options.copy(text="world", mode="pre")
    assert options2.text == "world"
    assert options2.mode == "pre"
    assert options2.width == 50
    assert options2.align == "center"
    assert options.text == "hello"

    with raises(AttributeError):
        options.text = "x"

    result = layout(options)
    assert len(result.glyphs) == 5


def test_text_layout(font):
    text_layout = TextLayout("ab\ncd", font)
    assert text_layout.lines_total == 2
    assert text_layout.words_total == 1
    assert text_layout.letters_total == 4
    assert text_layout.height == 70
    assert text_layout.width == 20
    assert text_layout.options.text == "ab\ncd"

    first = text_layout.result

    # Updating recomputes everything; the same input gives the same result
    text_layout.update("ab\ncd", font)
    assert text_layout.result is not first
    assert text_layout.result.glyphs == first.glyphs
    assert positions(text_layout.result) == positions(first)
    assert text_layout.result.metrics == first.metrics

    # Nothing carries over from the previous layout
    text_layout.update("a", font)
    assert text_layout.lines_total == 1
    assert len(text_layout.glyphs) == 1
    assert text_layout.height == 30

    text_layout.update(LayoutOptions("abc", font))
    assert len(text_layout.visible_glyphs) == 3
