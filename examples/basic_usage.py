"""
Basic usage example for logbatch.

Run with a target endpoint, e.g.::

    LOGBATCH_PROFILES__DEFAULT__ENDPOINT_URL=https://logs.example.com/inputs/TOKEN \
        python examples/basic_usage.py
"""

import logging

from logbatch import get_shipper
from logbatch.integrations import LogBatchHandler


def main() -> None:
    shipper = get_shipper()

    # Immediate delivery (batch mode off): one POST per call
    shipper.single_log("Application started")
    shipper.single_log("Config loaded", level="DEBUG")

    # Batched delivery: one POST for the whole session on exit
    with shipper.new_session() as session:
        session.add("Import started")
        for n in range(3):
            session.add(f"Imported chunk {n}")
        session.add("Import finished", level="WARN")

    # stdlib logging bridge
    logger = logging.getLogger("example")
    logger.addHandler(LogBatchHandler(shipper))
    logger.setLevel(logging.INFO)
    logger.info("Hello from logging")

    # Wait for in-flight deliveries and release the HTTP client
    shipper.close()


if __name__ == "__main__":
    main()
