"""
The layout step. Takes a piece of text, a font and some options, and
produces a list of positioned glyphs, plus metrics of the text block as a
whole.

Layout happens in two passes. First the text is wrapped into lines, using a
measure function that knows about the glyphs in the font (their advance,
kerning and bitmap width). Then each line is walked to place the glyphs,
applying kerning, letter spacing and alignment, and to assign each glyph
its line, word and letter indices.

Coordinates are in font units (atlas pixels). The vertical cursor starts at
``-height`` and moves down with ``line_height`` for each line; the geometry
step negates y again, so that the first line ends up at the top.
"""

import numbers
from typing import NamedTuple

from ..utils import logger, assert_type, ReadOnlyDict, ConfigurationError
from ..utils.enums import TextAlign
from ._font import Font, FontChar
from ._wordwrap import LineSpan, wordwrap_lines, normalize_wrap_mode


TAB_ID = ord("\t")
SPACE_ID = ord(" ")


class LayoutOptions:
    """The options for laying out a piece of text.

    Parameters:
        text (str): the text to lay out. Default "".
        font (Font | dict): the font, or a decoded BMFont descriptor. Required.
        width (float | None): the minimum width of the text block, and the
            width at which lines are wrapped. None or 0 means no wrapping.
        align (str | TextAlign): "left" (default), "center" or "right".
        letter_spacing (float): extra space between glyphs. Default 0.
        tab_size (float): the advance of a tab character, in font units. Default 4.
        line_height (float): the line height as a multiple of the font's line
            height. Values below 1 are raised to 1. Default 1.
        mode (str | WrapMode | None): "greedy" (default), "pre" or "nowrap".
        measure (callable | None): a custom measure function for the word
            wrapper. By default a glyph-aware function is used.
    """

    def __init__(
        self,
        text="",
        font=None,
        *,
        width=None,
        align=None,
        letter_spacing=0,
        tab_size=4,
        line_height=1,
        mode=None,
        measure=None,
    ):
        # Check text
        if text is None:
            text = ""
        elif not isinstance(text, str):
            cls = type(text).__name__
            raise TypeError(f"Text must be str, not '{cls}'")

        # Check font
        if font is None:
            raise ConfigurationError("Must provide a valid bitmap font.")
        elif isinstance(font, dict):
            font = Font.from_dict(font)
        elif not isinstance(font, Font):
            cls = type(font).__name__
            raise ConfigurationError(f"Font must be a Font or dict, not '{cls}'")

        # Check numbers
        assert_type("width", width, None, numbers.Real)
        assert_type("letter_spacing", letter_spacing, None, numbers.Real)
        assert_type("tab_size", tab_size, None, numbers.Real)
        assert_type("line_height", line_height, None, numbers.Real)
        if width is not None and width < 0:
            raise ValueError("Layout width must not be negative.")

        # Check align
        if align is None:
            align = "left"
        elif not isinstance(align, str):
            raise TypeError("Text align must be None or str.")
        align = align.lower().strip()
        if align not in TextAlign.__fields__:
            raise ValueError(f"Text align must be one of {TextAlign}. Got {align!r}")

        # Check measure
        if measure is not None and not callable(measure):
            raise TypeError("The measure function must be callable.")

        self._kwargs = {
            "text": text,
            "font": font,
            "width": None if width is None else float(width),
            "align": TextAlign[align],
            "letter_spacing": float(letter_spacing or 0),
            "tab_size": 4.0 if tab_size is None else float(tab_size),
            "line_height": max(1.0, float(line_height or 1.0)),
            "mode": normalize_wrap_mode(mode),
            "measure": measure,
        }

    def __repr__(self):
        return f"<LayoutOptions {self.text[:20]!r} at {hex(id(self))}>"

    def copy(self, **kwargs):
        """Make a copy of the options, with given kwargs replaced."""
        d = self._kwargs.copy()
        d.update(kwargs)
        return self.__class__(**d)

    @property
    def text(self):
        """The text to lay out."""
        return self._kwargs["text"]

    @property
    def font(self):
        """The Font object."""
        return self._kwargs["font"]

    @property
    def width(self):
        """The minimum width of the block, and the width to wrap at (None for no wrapping)."""
        return self._kwargs["width"]

    @property
    def align(self):
        """The horizontal alignment of the lines."""
        return self._kwargs["align"]

    @property
    def letter_spacing(self):
        return self._kwargs["letter_spacing"]

    @property
    def tab_size(self):
        """The advance of a tab, in font units."""
        return self._kwargs["tab_size"]

    @property
    def line_height(self):
        """The line height factor (at least 1)."""
        return self._kwargs["line_height"]

    @property
    def mode(self):
        """The wrap mode."""
        return self._kwargs["mode"]

    @property
    def measure(self):
        """The custom measure function, or None."""
        return self._kwargs["measure"]


class PositionedGlyph(NamedTuple):
    """A glyph placed by the layout. Created for each character that resolves to a glyph."""

    position: tuple  # (x, y) of the pen, in font units
    glyph: FontChar
    source_index: int  # index of the character in the text
    line_index: int
    line_total: int
    line_letter_index: int
    line_letter_total: int
    line_word_index: int
    line_word_total: int
    global_letter_index: int
    global_letter_total: int
    global_word_index: int
    global_word_total: int

    @property
    def visible(self):
        """Whether this glyph has a bitmap, i.e. produces geometry."""
        return self.glyph.area > 0


class LayoutResult:
    """The result of a layout: the positioned glyphs and the block metrics.

    The result is not modified after creation; a new layout produces a new result.
    """

    __slots__ = [
        "_ascender",
        "_baseline",
        "_cap_height",
        "_descender",
        "_glyphs",
        "_height",
        "_letters_total",
        "_line_height",
        "_lines",
        "_visible_glyphs",
        "_width",
        "_words_total",
        "_x_height",
    ]

    def __init__(
        self,
        glyphs,
        lines,
        *,
        width,
        height,
        ascender,
        descender,
        x_height,
        cap_height,
        baseline,
        line_height,
        words_total,
        letters_total,
    ):
        self._glyphs = tuple(glyphs)
        self._visible_glyphs = tuple(g for g in self._glyphs if g.visible)
        self._lines = tuple(lines)
        self._width = width
        self._height = height
        self._ascender = ascender
        self._descender = descender
        self._x_height = x_height
        self._cap_height = cap_height
        self._baseline = baseline
        self._line_height = line_height
        self._words_total = words_total
        self._letters_total = letters_total

    def __repr__(self):
        return (
            f"<LayoutResult {len(self._lines)} lines, {len(self._glyphs)} glyphs, "
            f"{self._width:g}x{self._height:g} at {hex(id(self))}>"
        )

    @property
    def glyphs(self):
        """All positioned glyphs (a tuple), in text order. Includes whitespace glyphs."""
        return self._glyphs

    @property
    def visible_glyphs(self):
        """The positioned glyphs that have a non-zero bitmap area."""
        return self._visible_glyphs

    @property
    def lines(self):
        """The LineSpan objects produced by the word wrapper."""
        return self._lines

    @property
    def width(self):
        """The width of the block: the widest line, or the minimum width if larger."""
        return self._width

    @property
    def height(self):
        """The height of the block: ``line_height * lines_total - descender``."""
        return self._height

    @property
    def ascender(self):
        return self._ascender

    @property
    def descender(self):
        return self._descender

    @property
    def x_height(self):
        return self._x_height

    @property
    def cap_height(self):
        return self._cap_height

    @property
    def baseline(self):
        return self._baseline

    @property
    def line_height(self):
        """The distance between lines, in font units."""
        return self._line_height

    @property
    def lines_total(self):
        return len(self._lines)

    @property
    def words_total(self):
        return self._words_total

    @property
    def letters_total(self):
        return self._letters_total

    @property
    def metrics(self):
        """A ReadOnlyDict with the scalar metrics of this layout."""
        return ReadOnlyDict(
            width=self._width,
            height=self._height,
            ascender=self._ascender,
            descender=self._descender,
            x_height=self._x_height,
            cap_height=self._cap_height,
            baseline=self._baseline,
            line_height=self._line_height,
            lines_total=len(self._lines),
            words_total=self._words_total,
            letters_total=self._letters_total,
        )


def get_fallback_glyphs(font, tab_size):
    """Get the glyphs to use for space and tab when the font does not have them.

    The space falls back to 'm' or 'w', and then to the first char in the font.
    The tab is a copy of that with zero size, and an advance of ``tab_size``.
    """
    space = font.get_char(SPACE_ID) or font.get_m_glyph() or font.chars[0]
    tab = space.copy(
        id=TAB_ID,
        x=0,
        y=0,
        width=0,
        height=0,
        xoffset=0,
        yoffset=0,
        xadvance=tab_size or 0,
    )
    return space, tab


class _GlyphResolver:
    """Resolves character codes to glyphs, using the fallbacks for space and tab."""

    __slots__ = ["font", "space", "tab"]

    def __init__(self, font, tab_size):
        self.font = font
        self.space, self.tab = get_fallback_glyphs(font, tab_size)

    def __call__(self, id):
        glyph = self.font.get_char(id)
        if glyph is not None:
            return glyph
        elif id == TAB_ID:
            return self.tab
        elif id == SPACE_ID:
            return self.space
        return None


def make_glyph_measure(font, get_glyph, letter_spacing=0.0):
    """Create a measure function for the word wrapper that uses the font's glyphs.

    The returned function stops before the glyph that would make the
    advance or the bitmap extent reach the available width.
    """

    def measure(text, start, end, width):
        pen = 0.0
        extent = 0.0
        count = 0
        last_glyph = None

        for i in range(start, min(len(text), end)):
            glyph = get_glyph(ord(text[i]))
            if glyph is not None:
                if last_glyph is not None:
                    pen += font.get_kerning(last_glyph.id, glyph.id)
                next_pen = pen + glyph.xadvance + letter_spacing
                next_extent = pen + glyph.width
                if next_extent >= width or next_pen >= width:
                    break
                pen = next_pen
                extent = next_extent
                last_glyph = glyph
            count += 1

        if last_glyph is not None:
            extent += last_glyph.xoffset

        return LineSpan(start, start + count, extent)

    return measure


def layout(text, font=None, **kwargs):
    """Lay out a piece of text.

    Parameters:
        text (str | LayoutOptions): the text, or a complete LayoutOptions object.
        font (Font | dict): the font (when text is a str).
        kwargs: the other options, see ``LayoutOptions``.

    Returns a new LayoutResult.
    """
    if isinstance(text, LayoutOptions):
        if font is not None or kwargs:
            raise TypeError(
                "layout() takes either a LayoutOptions or text and options."
            )
        options = text
    else:
        options = LayoutOptions(text, font, **kwargs)

    text = options.text
    font = options.font
    letter_spacing = options.letter_spacing
    get_glyph = _GlyphResolver(font, options.tab_size)

    # --- wrap

    measure = options.measure or make_glyph_measure(font, get_glyph, letter_spacing)
    lines = wordwrap_lines(
        text, width=options.width or None, mode=options.mode, measure=measure
    )

    # --- block metrics

    min_width = options.width or 0.0
    max_line_width = 0.0
    for line in lines:
        max_line_width = max(max_line_width, line.width, min_width)

    line_height = font.common.line_height * options.line_height
    baseline = font.common.base
    descender = line_height - baseline
    height = line_height * len(lines) - descender if lines else 0.0
    x_height = font.x_height
    ascender = line_height - descender - x_height

    # Totals are based on the raw text, spaces are the word separator
    words_total = len([w for w in text.split(" ") if w != "\n"]) if text else 0
    letters_total = sum(1 for c in text if c not in ("\n", " "))

    # --- place glyphs

    glyphs = []
    unmapped = set()
    lines_total = len(lines)
    align = options.align
    word_index = 0
    letter_index = 0
    y = -height

    for line_index, line in enumerate(lines):
        line_string = text[line.start : line.end]
        line_word_total = len([w for w in line_string.split(" ") if w])
        line_letter_total = len(line_string.replace(" ", ""))
        line_word_index = 0
        line_letter_index = 0

        if align == "center":
            dx = 0.5 * (max_line_width - line.width)
        elif align == "right":
            dx = max_line_width - line.width
        else:
            dx = 0.0

        x = 0.0
        last_glyph = None
        last_char = None

        for i in range(line.start, line.end):
            char = text[i]
            glyph = get_glyph(ord(char))
            if glyph is None:
                unmapped.add(char)
                continue

            if last_glyph is not None:
                x += font.get_kerning(last_glyph.id, glyph.id)

            glyphs.append(
                PositionedGlyph(
                    position=(x + dx, y),
                    glyph=glyph,
                    source_index=i,
                    line_index=line_index,
                    line_total=lines_total,
                    line_letter_index=line_letter_index,
                    line_letter_total=line_letter_total,
                    line_word_index=line_word_index,
                    line_word_total=line_word_total,
                    global_letter_index=letter_index,
                    global_letter_total=letters_total,
                    global_word_index=word_index,
                    global_word_total=words_total,
                )
            )

            # A word ends where a run of spaces starts
            if char == " " and last_char != " ":
                line_word_index += 1
                word_index += 1
            if char != " ":
                line_letter_index += 1
                letter_index += 1

            x += glyph.xadvance + letter_spacing
            last_glyph = glyph
            last_char = char

        y += line_height

    if unmapped:
        chars = "".join(sorted(unmapped))
        logger.debug(f"Font has no glyphs for {chars!r}, these are skipped.")

    return LayoutResult(
        glyphs,
        lines,
        width=max_line_width,
        height=height,
        ascender=ascender,
        descender=descender,
        x_height=x_height,
        cap_height=font.cap_height,
        baseline=baseline,
        line_height=line_height,
        words_total=words_total,
        letters_total=letters_total,
    )


class TextLayout:
    """A re-entrant layout object, for code that prefers to hold on to a layout.

    Each call to ``update()`` computes a complete new layout; nothing is
    carried over from the previous one.
    """

    def __init__(self, text, font=None, **kwargs):
        self._result = None
        self._options = None
        self.update(text, font, **kwargs)

    def update(self, text, font=None, **kwargs):
        """Lay out the text again, with the given options (same signature as ``layout()``)."""
        if isinstance(text, LayoutOptions) and font is None and not kwargs:
            options = text
        else:
            options = LayoutOptions(text, font, **kwargs)
        self._result = layout(options)
        self._options = options

    @property
    def options(self):
        """The LayoutOptions of the current layout."""
        return self._options

    @property
    def result(self):
        """The current LayoutResult."""
        return self._result

    @property
    def glyphs(self):
        return self._result.glyphs

    @property
    def visible_glyphs(self):
        return self._result.visible_glyphs

    @property
    def width(self):
        return self._result.width

    @property
    def height(self):
        return self._result.height

    @property
    def ascender(self):
        return self._result.ascender

    @property
    def descender(self):
        return self._result.descender

    @property
    def x_height(self):
        return self._result.x_height

    @property
    def cap_height(self):
        return self._result.cap_height

    @property
    def baseline(self):
        return self._result.baseline

    @property
    def line_height(self):
        return self._result.line_height

    @property
    def lines_total(self):
        return self._result.lines_total

    @property
    def words_total(self):
        return self._result.words_total

    @property
    def letters_total(self):
        return self._result.letters_total
