"""
agent_chat.services.chat_session

Chat session service (composition root of one user's chat).

Responsibilities:
- Own the backend client, the live run, and the HITL conversation controller.
- Send messages and resume decisions as streamed runs, consumed in background.
- Route thread, credential, and HITL toggle changes to the controller.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from agent_chat.backend.client import AgentBackendClient
from agent_chat.backend.live import LiveRun, UpdateListener
from agent_chat.hitl.lifecycle import ConversationController
from agent_chat.hitl.models import Decision, DecisionKind, InterruptRecord
from agent_chat.observability.logging import get_logger
from agent_chat.services.messages import build_human_message, filter_supported
from agent_chat.settings import Settings

log = get_logger(__name__)


class NoActiveThread(RuntimeError):
    pass


class ChatSession:
    def __init__(
        self,
        *,
        settings: Settings,
        http: httpx.AsyncClient,
        on_update: UpdateListener | None = None,
    ) -> None:
        self.backend = AgentBackendClient(
            settings=settings, http=http, access_token=settings.api_key
        )
        self.live = LiveRun(on_update=on_update)
        self.controller = ConversationController(
            probe=self.live.probe,
            query=self.backend.get_thread_state,
            submit=self.submit_resume,
            interval_s=settings.hitl_poll_interval_s,
            enabled=settings.hitl_enabled,
            has_credentials=self.backend.has_credentials,
        )
        self._stream_task: asyncio.Task[None] | None = None

    @property
    def thread_id(self) -> str | None:
        return self.controller.conversation_id

    @property
    def interrupt(self) -> InterruptRecord | None:
        return self.controller.interrupt

    @property
    def is_streaming(self) -> bool:
        return self._stream_task is not None and not self._stream_task.done()

    @property
    def messages(self) -> list[dict[str, Any]]:
        return filter_supported(self.live.values.get("messages") or [])

    # Context ----------------------------------------------------------------

    def switch_thread(self, thread_id: str | None) -> None:
        if thread_id == self.thread_id:
            return
        self._drop_stream()
        self.live.reset(thread_id)
        self.controller.switch(thread_id)

    def set_access_token(self, token: str | None) -> None:
        self.backend.set_access_token(token)
        self.controller.set_credentials_available(self.backend.has_credentials)

    def set_hitl_enabled(self, enabled: bool) -> None:
        self.controller.set_enabled(enabled)

    # Runs -------------------------------------------------------------------

    async def send_message(self, text: str, image_urls: Sequence[str] = ()) -> dict[str, Any]:
        thread_id = self.thread_id
        if thread_id is None:
            thread_id = await self.backend.create_thread()
            log.info("thread_created", thread_id=thread_id)
            self.switch_thread(thread_id)

        message = build_human_message(text, image_urls)
        messages = list(self.live.values.get("messages") or [])
        # Optimistic: show the message before the backend echoes it in `values`.
        self.live.values = {**self.live.values, "messages": [*messages, message]}
        await self._start_run(thread_id, input={"messages": [message]})
        log.info("message_sent", message_id=message["id"], images=len(image_urls))
        return message

    async def submit_resume(self, thread_id: str, resume: Mapping[str, Any]) -> None:
        """
        Resume submitter for the HITL coordinator; raises if the backend refuses the run.
        """

        if thread_id != self.thread_id:
            raise NoActiveThread(f"thread {thread_id} is no longer active")
        await self._start_run(thread_id, command={"resume": dict(resume)})

    async def _start_run(
        self,
        thread_id: str,
        *,
        input: Mapping[str, Any] | None = None,
        command: Mapping[str, Any] | None = None,
    ) -> None:
        self._drop_stream()
        accepted: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._stream_task = asyncio.create_task(
            self._consume(thread_id, accepted, input=input, command=command),
            name=f"run:{thread_id}",
        )
        # Acceptance is the first event; failures before it propagate to the caller.
        await accepted

    async def _consume(
        self,
        thread_id: str,
        accepted: asyncio.Future[None],
        **run: Any,
    ) -> None:
        try:
            async for event in self.backend.stream_run(thread_id, **run):
                if not accepted.done():
                    accepted.set_result(None)
                self.live.apply(event)
        except asyncio.CancelledError:
            if not accepted.done():
                accepted.set_exception(NoActiveThread(f"run on {thread_id} was superseded"))
            raise
        except Exception as e:
            if not accepted.done():
                accepted.set_exception(e)
                return
            log.warning("run_stream_failed", error=str(e))
        if not accepted.done():
            accepted.set_result(None)

    async def join(self) -> None:
        """
        Wait until the background stream (if any) has been fully consumed.
        """

        task = self._stream_task
        if task is not None:
            await asyncio.shield(task)

    async def stop(self) -> None:
        run_id = self.live.run_id
        thread_id = self.thread_id
        self._drop_stream()
        if thread_id is None or run_id is None:
            return
        try:
            await self.backend.cancel_run(thread_id, run_id)
        except httpx.HTTPError as e:
            log.warning("run_cancel_failed", run_id=run_id, error=str(e))
        else:
            log.info("run_cancelled", run_id=run_id)

    def _drop_stream(self) -> None:
        if self._stream_task is not None:
            self._stream_task.cancel()
            self._stream_task = None

    # HITL -------------------------------------------------------------------

    async def resolve(
        self,
        decision: Decision | DecisionKind | str,
        edited_args: Mapping[str, Any] | None = None,
    ) -> bool:
        return await self.controller.resolve(decision, edited_args)

    async def aclose(self) -> None:
        self.controller.close()
        task, self._stream_task = self._stream_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


# --- Module Notes -----------------------------------------------------------
# Thread switches, credential changes, and HITL toggles may start the detector task, so
# they must be called from inside the running event loop.
