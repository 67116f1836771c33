"""Entrypoint for `python -m CubeBrew`."""
import logging

logger = logging.getLogger("cubebrew")


def _run_cli():
    from .cli import main as cli_main
    logger.debug("Dispatching to CLI entrypoint.")
    cli_main()


if __name__ == "__main__":
    _run_cli()
