import logging

from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(name)s - %(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
