"""
Request/response RPC over Redis Pub/Sub.

A request is published on "{prefix}.{pattern}":

    {"id": "<uuid>", "pattern": "FIND_PERMISSIONS_BY_GROUP",
     "data": {...}, "reply_to": "{prefix}.reply.<uuid>"}

The server answers on reply_to with {"id": ..., "response": ...} or
{"id": ..., "err": "..."}.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any, Awaitable, Callable, Optional

from redis.exceptions import RedisError

from ..core.errors import UpstreamError
from .client import RedisClient

logger = logging.getLogger(__name__)

RpcHandler = Callable[[dict[str, Any]], Awaitable[Any]]


class RedisRpcClient:
    """
    Sends RPC requests and awaits the matching reply.

    Usage:
        rpc = RedisRpcClient(client, prefix="grants", timeout=10.0)
        perms = await rpc.send("FIND_PERMISSIONS_BY_GROUP", {"groupId": "g1", "entityName": "User"})
    """

    def __init__(self, client: RedisClient, prefix: str = "grants", timeout: float = 10.0):
        """
        Initialize RPC client.

        Args:
            client: Connected Redis client (anything with publish() and pubsub())
            prefix: Channel prefix shared with the server
            timeout: Seconds to wait for a reply
        """
        self.client = client
        self.prefix = prefix
        self.timeout = timeout

    async def send(self, pattern: str, data: dict[str, Any]) -> Any:
        """
        Send a request and return the reply payload.

        Raises:
            UpstreamError: Redis failure, no server listening, timeout, or server-side error
        """
        try:
            reply = await self._request(pattern, data)
        except RedisError as e:
            raise UpstreamError(service=f"{self.prefix}.{pattern}", status_code=0, message=str(e))

        if reply.get("err") is not None:
            raise UpstreamError(service=f"{self.prefix}.{pattern}", status_code=500, message=str(reply["err"]))
        return reply.get("response")

    async def _request(self, pattern: str, data: dict[str, Any]) -> dict[str, Any]:
        request_id = uuid.uuid4().hex
        reply_to = f"{self.prefix}.reply.{request_id}"
        channel = f"{self.prefix}.{pattern}"

        pubsub = self.client.pubsub()
        await pubsub.subscribe(reply_to)
        try:
            payload = json.dumps(
                {"id": request_id, "pattern": pattern, "data": data, "reply_to": reply_to},
                ensure_ascii=False,
            )
            receivers = await self.client.publish(channel, payload)
            if not receivers:
                raise UpstreamError(service=channel, status_code=0, message="no RPC server is listening")

            logger.debug(f"RPC {pattern} sent ({request_id}), waiting on {reply_to}")
            try:
                reply = await asyncio.wait_for(self._wait_reply(pubsub, request_id), timeout=self.timeout)
            except asyncio.TimeoutError:
                raise UpstreamError(
                    service=channel,
                    status_code=0,
                    message=f"no reply within {self.timeout}s",
                )
        finally:
            await pubsub.unsubscribe(reply_to)
            await pubsub.aclose()

        return reply

    async def _wait_reply(self, pubsub, request_id: str) -> dict[str, Any]:
        while True:
            message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            if not message or message["type"] != "message":
                continue
            try:
                reply = json.loads(message["data"])
            except (TypeError, json.JSONDecodeError):
                logger.warning(f"Invalid RPC reply for {request_id}: {str(message['data'])[:100]}")
                continue
            if reply.get("id") == request_id:
                return reply


class RpcServer:
    """
    Serves RPC patterns from registered handlers.

    Usage:
        server = RpcServer(client, prefix="grants")

        @server.handler("FIND_PERMISSIONS_BY_GROUP")
        async def find(data: dict):
            return [...]

        await server.start()
    """

    def __init__(self, client: RedisClient, prefix: str = "grants"):
        self.client = client
        self.prefix = prefix
        self._handlers: dict[str, RpcHandler] = {}
        self._pubsub = None
        self._listener_task: Optional[asyncio.Task] = None
        self._running = False

    def handler(self, pattern: str):
        """Decorator to register the handler of a pattern."""
        def decorator(func: RpcHandler):
            self.register(pattern, func)
            return func
        return decorator

    def register(self, pattern: str, func: RpcHandler):
        self._handlers[pattern] = func
        logger.info(f"Registered RPC handler: {pattern}")

    def channel_for(self, pattern: str) -> str:
        return f"{self.prefix}.{pattern}"

    async def start(self):
        """Subscribe to every registered pattern and start serving."""
        if self._running:
            logger.warning("RPC server already running")
            return

        if not self._handlers:
            logger.warning("No RPC handlers registered, server not started")
            return

        self._pubsub = self.client.pubsub()
        channels = [self.channel_for(p) for p in self._handlers]
        await self._pubsub.subscribe(*channels)
        logger.info(f"RPC server subscribed to: {channels}")

        self._running = True
        self._listener_task = asyncio.create_task(self._listen())

    async def stop(self):
        """Stop serving."""
        self._running = False

        if self._listener_task:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
            self._listener_task = None

        if self._pubsub:
            await self._pubsub.aclose()
            self._pubsub = None

        logger.info("RPC server stopped")

    async def _listen(self):
        while self._running:
            try:
                message = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if message and message["type"] == "message":
                    await self.handle_message(message["data"])
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"RPC listener error: {e}", exc_info=True)
                await asyncio.sleep(1)

    async def handle_message(self, raw_data: str):
        """Dispatch one request and publish its reply."""
        try:
            request = json.loads(raw_data) if isinstance(raw_data, str) else raw_data
        except json.JSONDecodeError:
            logger.warning(f"Invalid RPC request: {raw_data[:100]}")
            return

        reply_to = request.get("reply_to")
        request_id = request.get("id")
        if not reply_to:
            logger.warning(f"RPC request {request_id} has no reply_to, dropped")
            return

        handler = self._handlers.get(request.get("pattern"))
        if handler is None:
            reply = {"id": request_id, "err": f"Unknown pattern {request.get('pattern')!r}"}
        else:
            try:
                reply = {"id": request_id, "response": await handler(request.get("data") or {})}
            except Exception as e:
                logger.error(f"RPC handler {request.get('pattern')} failed: {e}", exc_info=True)
                reply = {"id": request_id, "err": str(e)}

        await self.client.publish(reply_to, json.dumps(reply, ensure_ascii=False, default=str))
