"""
The stages of text layout:

* Font description (decoded BMFont data, made queryable)
* Word wrapping (splitting text into lines with a measure function)
* Layout (placing glyphs with kerning and alignment)

The final stage, turning positioned glyphs into vertex buffers, is
implemented in ``msdftext.geometries``.
"""

from ._font import FontChar, FontKerning, FontCommon, Font  # noqa: F401
from ._wordwrap import (  # noqa: F401
    LineSpan,
    MeasureFunc,
    monospace,
    wordwrap,
    wordwrap_lines,
)
from ._layout import (  # noqa: F401
    LayoutOptions,
    LayoutResult,
    PositionedGlyph,
    TextLayout,
    get_fallback_glyphs,
    make_glyph_measure,
    layout,
)
