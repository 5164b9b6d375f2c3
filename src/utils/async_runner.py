import asyncio
import threading
from typing import Any, Coroutine, TypeVar
import streamlit as st

T = TypeVar("T")


class AsyncRunner:
    """One long-lived event loop that owns every cache and realtime channel.

    Streamlit reruns the script on its own thread; coroutines are handed to
    this loop so cached state is only ever touched from a single loop.
    """

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self.loop.run_forever, name="voiceup-loop", daemon=True
        )
        self._thread.start()

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result()

    def call(self, fn, *args) -> None:
        self.loop.call_soon_threadsafe(fn, *args)

    def spawn(self, coro_fn, *args) -> None:
        """Schedule `coro_fn(*args)` on the loop without waiting for it."""
        self.loop.call_soon_threadsafe(lambda: self.loop.create_task(coro_fn(*args)))


@st.cache_resource(show_spinner=False)
def get_runner() -> AsyncRunner:
    return AsyncRunner()
