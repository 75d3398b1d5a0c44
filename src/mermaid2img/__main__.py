"""Allow ``python -m mermaid2img``."""

from mermaid2img.cli import cli

if __name__ == "__main__":
    cli()
