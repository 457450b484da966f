"""
The enums used in msdftext. The enums are all available from the root ``msdftext`` namespace.

.. currentmodule:: msdftext.utils.enums

.. autosummary::
    :toctree: utils/enums
    :template: ../_templates/custom_layout.rst

    TextAlign
    WrapMode

"""

from wgpu.utils import BaseEnum


__all__ = [
    "TextAlign",
    "WrapMode",
]


class Enum(BaseEnum):
    """Enum base class for msdftext."""


class TextAlign(Enum):
    """How the lines of a text block are aligned horizontally."""

    left = None  #: Lines start at the left edge of the block.
    center = None  #: Lines are centered between the left and right edges.
    right = None  #: Lines end at the right edge of the block.


class WrapMode(Enum):
    """How a run of text is broken into lines."""

    greedy = None  #: Break at explicit newlines, and wrap words that exceed the width.
    pre = None  #: Break at explicit newlines only; the width does not wrap.
    nowrap = None  #: Like greedy, but with an unbounded width.


# NOTE: Don't forget to add new enums to the toctree and __all__
