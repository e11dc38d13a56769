"""Root logger setup shared by the API and the CLI."""

import logging

NOISY_LOGGERS = ("httpx", "httpcore", "openai", "asyncio")


def setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    while root.handlers:
        root.handlers.pop()
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    root.addHandler(stream)
    # outbound requests are logged by coffee_scan.reviews.http
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
