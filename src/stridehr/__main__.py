# stridehr/__main__.py
# Entry point for `python -m stridehr`; same commands as the `stridehr` script.
from stridehr.cli import cli

if __name__ == "__main__":
    cli(prog_name="stridehr")
