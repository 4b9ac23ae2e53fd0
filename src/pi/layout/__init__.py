"""pi-layout: redraw optimisation cache for terminal line editors."""

# Layout cache
from pi.layout.cache import LayoutCache

# Configuration
from pi.layout.config import DEFAULT_TAB_STOP, LayoutOptions, load_layout_options

# Edits and repaint spans
from pi.layout.edits import Delete, Edit, Insert, Replace, Span

# Cached entries
from pi.layout.entry import Entry

# Errors
from pi.layout.errors import LayoutArithmeticError, LayoutError, LayoutInvariantError

# Grapheme segmentation
from pi.layout.graphemes import byte_len, grapheme_width, segment, text_width

# Coordinates
from pi.layout.position import ORIGIN, ZERO, Position, Shift

# Prompts
from pi.layout.prompt import Prompt, PromptContext, StaticPrompt, render_prompt

__all__ = [
    "DEFAULT_TAB_STOP",
    "Delete",
    "Edit",
    "Entry",
    "Insert",
    "LayoutArithmeticError",
    "LayoutCache",
    "LayoutError",
    "LayoutInvariantError",
    "LayoutOptions",
    "ORIGIN",
    "Position",
    "Prompt",
    "PromptContext",
    "Replace",
    "Shift",
    "Span",
    "StaticPrompt",
    "ZERO",
    "byte_len",
    "grapheme_width",
    "load_layout_options",
    "render_prompt",
    "segment",
    "text_width",
]
