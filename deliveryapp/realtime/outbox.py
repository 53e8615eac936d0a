import asyncio
import logging

from fastapi import WebSocketDisconnect
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


class SocketOutbox:
    """
    Messages bound for one websocket. ``push`` may be called from any
    thread (change-feed callbacks run on the writing thread); ``pump`` runs
    on the socket's event loop and is the only sender.
    """

    def __init__(self, loop=None):
        self.loop = loop or asyncio.get_running_loop()
        self.queue: asyncio.Queue = asyncio.Queue()

    def push(self, message: dict):
        if self.loop.is_closed():
            logger.debug(f"Dropping {message.get('type')} message, loop closed")
            return
        self.loop.call_soon_threadsafe(self.queue.put_nowait, jsonable_encoder(message))

    async def pump(self, websocket):
        while True:
            message = await self.queue.get()
            await websocket.send_json(message)

    async def serve(self, websocket, on_message=None):
        """Send queued messages and feed incoming ones to ``on_message`` until disconnect."""
        sender = asyncio.create_task(self.pump(websocket))
        try:
            while True:
                try:
                    message = await websocket.receive_json()
                except ValueError:
                    self.push({"type": "error", "message": "Mensagem inválida"})
                    continue
                if on_message is not None:
                    await on_message(message)
        except WebSocketDisconnect:
            pass
        finally:
            sender.cancel()
