"""
Containers for text geometry data.

.. currentmodule:: msdftext.geometries

The text geometry turns the glyphs of a layout into flat arrays that a
renderer uploads as vertex and index buffers. Each visible glyph is one quad
(4 vertices, 2 triangles).

The arrays are:

* ``positions``: xyz per vertex. The z is always zero.
* ``uvs``: the coordinates of the glyph in the atlas texture.
* ``layout_uvs``: the position of the vertex relative to the whole text block.
* ``centers``: the center of the glyph's quad, the same for its 4 vertices.
* Seven info channels (one value per vertex): the line index, the number of
  letters and words on the line, the letter and word index within the line,
  and the global word and letter index.
* ``indices``: 6 indices per quad, clockwise by default.

.. autosummary::
    :toctree: geometries/
    :template: ../_templates/custom_layout.rst

    TextGeometry
    build_attributes
    build_infos
    create_indices

"""

# ruff: noqa: F401

from ._text import (
    TextGeometry,
    build_attributes,
    build_infos,
    create_indices,
    INFO_CHANNELS,
    VERTEX_ATTRIBUTE_NAMES,
)
