#!/usr/bin/env python3
"""Zigbee light control: remotes to shared state to zigbee2mqtt lights."""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Any, Dict, Optional

import yaml

from config import load_config
from light_control_app import LightControl

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="light-control")
    p.add_argument(
        "-c",
        "--config",
        help="Directory or file path for light_control.yaml",
    )
    return p


async def main(config: Dict[str, Any]):
    """Main entry point."""
    app = LightControl(config)
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    async def runner():
        try:
            await app.start()
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Light control stopped on error: {e}", exc_info=True)
        finally:
            await app.stop()
            stop_event.set()

    task = loop.create_task(runner())

    def _shutdown():
        if not task.done():
            logger.info("Shutting down...")
            task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _shutdown)
        except NotImplementedError:
            pass

    await stop_event.wait()


def run(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Configuration error: {e}")
        return 1
    logging.getLogger().setLevel(str(config.get("log_level", "INFO")).upper())
    asyncio.run(main(config))
    return 0


if __name__ == "__main__":
    sys.exit(run())
