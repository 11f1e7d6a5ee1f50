"""
Basic usage example for kvlog.

Builds a buffered logfmt pipeline, binds request context and routes the
standard library ``logging`` module through the same writer.
"""

import logging
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from kvlog import LoggerBuilder, levels, with_  # noqa: E402
from kvlog.core.stdlib_bridge import enable_stdlib_bridge  # noqa: E402


def main() -> None:
    """Demonstrate basic kvlog usage."""

    built = (
        LoggerBuilder()
        .with_name("example")
        .with_level("debug")
        .with_buffer(16, flush_period_seconds=0.5)
        .build()
    )
    with built:
        logger = built.logger

        levels.info(logger).log("msg", "Application started", "startup_time", 0.5)

        request_logger = with_(logger, "request_id", "req-42", "user", "alice")
        levels.debug(request_logger).log("msg", "Debug message")
        levels.warn(request_logger).log("msg", "Slow response", "elapsed_ms", 812)

        # Odd key-values are padded instead of raising
        levels.error(request_logger).log("msg", "Upstream failed", "status")

        handler = enable_stdlib_bridge(logger)
        logging.getLogger("thirdparty").warning("routed through kvlog")
        logging.getLogger().removeHandler(handler)

    print("\nBasic usage example completed!")


if __name__ == "__main__":
    main()
