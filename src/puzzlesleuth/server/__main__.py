"""PuzzleSleuth JSON-lines server entry point.

Usage: python -m puzzlesleuth.server

Reads JSON requests from stdin (one per line), writes JSON responses to stdout.
All logging goes to stderr to keep the protocol clean.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional

from puzzlesleuth.config.settings import Settings, configure_logging

from .handler import ServerHandler
from .protocol import Notification, ProtocolError, Request, Response

logger = logging.getLogger("puzzlesleuth.server")


async def handle_line(handler: ServerHandler, line: str) -> Optional[Response]:
    """Turn one input line into a response; blank lines produce none."""
    line = line.strip()
    if not line:
        return None
    try:
        request = Request.from_json_line(line)
    except ProtocolError as e:
        return Response(id=0, error=str(e))

    try:
        result = await handler.dispatch({"method": request.method, "params": request.params})
        return Response(id=request.id, result=result)
    except Exception as e:
        logger.warning("request %s (%s) failed: %s", request.id, request.method, e)
        return Response(id=request.id, error=str(e))


async def main(settings: Optional[Settings] = None) -> None:
    loop = asyncio.get_event_loop()

    def write_line(text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    def write_notification(notification: Notification) -> None:
        write_line(notification.to_json_line())

    handler = ServerHandler(settings=settings, write_notification=write_notification)
    logger.info("puzzlesleuth-server: ready (db=%s)", handler.store.db_path)

    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)

    while True:
        line = await reader.readline()
        if not line:
            break  # stdin closed

        response = await handle_line(handler, line.decode("utf-8", errors="replace"))
        if response is not None:
            write_line(response.to_json_line())


def run(settings: Optional[Settings] = None) -> None:
    settings = settings or Settings.load()
    configure_logging(settings.log_level)
    asyncio.run(main(settings))


if __name__ == "__main__":
    run()
