# src/tv_custom_sound/__main__.py
from __future__ import annotations


def main() -> int:
    """
    Module entrypoint:
      - python -m tv_custom_sound            -> CLI help
      - python -m tv_custom_sound <command>  -> CLI command
    """
    from tv_custom_sound.cli import main as cli_main

    # Let the CLI parse sys.argv itself.
    return int(cli_main())


if __name__ == "__main__":
    raise SystemExit(main())
