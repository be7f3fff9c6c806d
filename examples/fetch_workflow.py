"""
Fetch workflow example.

Shows a synchronous performer, a callback performer completing from a worker
thread, a performer that needs the application context, and local recovery
from a failed effect inside a generator.

Run with:
    EFFECTRUN_TRACE=1 python examples/fetch_workflow.py
"""

import threading

from effectrun import Callback, Direct, DispatchTable, define, run


def init_fetch(self, url):
    self.url = url


def init_sleep(self, seconds):
    self.seconds = seconds


Fetch = define("Fetch", init_fetch)
Sleep = define("Sleep", init_sleep)
Config = define("Config", lambda self, key: setattr(self, "key", key))


def perform_fetch(effect):
    if effect.url.startswith("bad:"):
        raise ConnectionError(f"cannot reach {effect.url}")
    return f"data:{effect.url}"


def perform_sleep(effect, completion):
    threading.Timer(effect.seconds, completion.complete, args=(effect.seconds,)).start()


def perform_config(context, effect):
    return context[effect.key]


def fetch_all():
    base = yield Config("base_url")
    first = yield Fetch(f"{base}/users")
    yield Sleep(0.05)
    try:
        second = yield Fetch("bad:host")
    except ConnectionError:
        second = "fallback"
    return [first, second]


table = DispatchTable(
    [
        (Fetch, perform_fetch),
        (Sleep, Callback(perform_sleep)),
        (Config, Direct(perform_config, contextual=True)),
    ]
)


if __name__ == "__main__":
    result = run(table, fetch_all(), context={"base_url": "https://api.example.com"})
    print(f"Result: {result}")
