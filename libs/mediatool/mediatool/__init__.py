"""MediaTool: audio extraction, subtitle generation and undo of generated files."""

__version__ = "0.1.0"
