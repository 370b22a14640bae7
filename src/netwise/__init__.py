"""
The main entrypoint for the NetWise package.

This module contains the NetWise FastAPI application, which wires the
conversation engine to a browser page. The engine runs on the server's event
loop; routes hand submissions to it as background tasks and the page polls a
snapshot of the view state.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional, Set

from fastapi import FastAPI

from . import config, engine, layout, llm, presenter, store
from .dispatcher import InputDispatcher

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


class NetWise(FastAPI):
    """
    Single-session chat client for Computer Networking questions.

    The constructor uses concrete default implementations, so serving
    ``NetWise()`` with uvicorn is enough to get a working app once
    ``GEMINI_API_KEY`` is set.
    """

    def __init__(
        self,
        settings: Optional[config.Settings] = None,
        llm: Optional[llm.LLM] = None,
        store: Optional[store.Store] = None,
        layout: Optional[layout.Layout] = None,
        presenter: Optional[presenter.WebView] = None,
        **kwargs,
    ) -> None:
        """
        Initialize the NetWise application.

        Parameters
        ----------
        settings : config.Settings, optional
            Session configuration. Defaults to ``Settings.from_env()``.
        llm : llm.LLM, optional
            Text-generation backend. Defaults to ``llm.Gemini(settings)``.
        store : store.Store, optional
            Transcript store. Defaults to ``store.InMemory()``.
        layout : layout.Layout, optional
            Page builder. Defaults to ``layout.Bootstrap()``.
        presenter : presenter.WebView, optional
            View state the page polls.
        **kwargs
            Additional arguments passed to the FastAPI constructor.

        Raises
        ------
        ValueError
            If the page is missing element IDs the page script needs.
        """
        config_module = globals()["config"]
        llm_module = globals()["llm"]
        store_module = globals()["store"]
        layout_module = globals()["layout"]
        presenter_module = globals()["presenter"]

        kwargs.setdefault("title", "NetWise")
        kwargs.setdefault("version", __version__)
        kwargs.setdefault("lifespan", self._lifespan)
        super().__init__(**kwargs)

        self.settings = settings or config_module.Settings.from_env()
        self.layout_builder = layout or layout_module.Bootstrap(
            topics=self.settings.suggested_topics,
            poll_interval_ms=self.settings.poll_interval_ms,
        )
        self.page = self.layout_builder.build_page()
        missing = layout_module.find_missing_ids(self.page)
        if missing:
            raise ValueError(f"Layout is missing required element IDs: {missing}")

        self.view = presenter if presenter is not None else presenter_module.WebView()
        self.llm = llm if llm is not None else llm_module.Gemini(self.settings)
        self.store = store if store is not None else store_module.InMemory()
        self.engine = engine.Serialized(
            store=self.store,
            llm=self.llm,
            presenter=self.view,
            settings=self.settings,
        )
        self.dispatcher = InputDispatcher(self.engine)
        self.tasks: Set[asyncio.Task] = set()
        self._dispatching: Optional[asyncio.Task] = None

        self._register_routes()

    def _register_routes(self) -> None:
        """Registers all the routes that connect the page to the engine."""
        from .routes import router

        self.include_router(router)

    @asynccontextmanager
    async def _lifespan(self, app):
        await self.startup()
        try:
            yield
        finally:
            await self.shutdown()

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self.tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self.tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background task failed", exc_info=task.exception())

    async def startup(self) -> None:
        """Starts the connection handshake and the welcome banner."""
        logger.info("Starting NetWise with model %s", self.settings.model)
        self._spawn(self.engine.start())

    def submit(self, raw: Optional[str]) -> Optional[asyncio.Task]:
        """Hands raw user input to the dispatcher as a background task.

        The slot is taken before this returns, so a second call made before
        the first task has run is refused. Returns None when refused.
        """
        pending = self._dispatching is not None and not self._dispatching.done()
        if pending or self.engine.state.is_busy:
            logger.info("Submission refused while a request is outstanding")
            return None

        self._dispatching = self._spawn(self.dispatcher.accept(raw))
        return self._dispatching

    def clear_transcript(self) -> None:
        self.engine.clear_transcript()

    async def drain(self) -> None:
        """Waits until every background task has finished."""
        while self.tasks:
            await asyncio.gather(*list(self.tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancels outstanding work and closes the backend client."""
        for task in list(self.tasks):
            task.cancel()
        await self.drain()
        await self.llm.aclose()
