"""mermaid2img - render mermaid diagrams in Markdown to images.

Features:
- Finds ```mermaid fenced blocks and replaces them in place
- Inline SVG, base64 JPEG data URIs, or JPEG files in ./mermaid/
- One headless Chromium session shared by every diagram in a run
- Failed diagrams are left untouched and reported

Usage:
    mermaid2img --md README.md
    mermaid2img --md docs/ --jpg --files
"""

from importlib.metadata import version

__version__ = version("mermaid2img")

__all__ = ["__version__"]
