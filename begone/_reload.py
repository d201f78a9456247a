"""
This module implements the active route table, and reloading it when
the pages directory changes.

The table is replaced as a whole on each reload; request handlers take
a snapshot and never see a table that is still being built.
"""

import os
import time
import threading
from collections import namedtuple

from ._logging import logger
from ._router import find_default_page
from ._scanner import scan_pages, format_routes


Snapshot = namedtuple("Snapshot", ["routes", "default_page"])


class PageTable:
    """ Object that holds the route table for a pages directory. Reading
    ``routes``, ``default_page`` or ``snapshot()`` is safe from any thread;
    ``reload()`` rebuilds the table and swaps it in.
    """

    def __init__(self, pages_dir, *, load=True):
        self._pages_dir = os.path.abspath(os.fspath(pages_dir))
        self._lock = threading.Lock()
        self._snapshot = Snapshot((), None)
        self._reload_count = 0
        if load:
            self.reload()

    def __repr__(self):
        return f"<PageTable {self._pages_dir!r} with {len(self.routes)} routes>"

    @property
    def pages_dir(self):
        """ The absolute path of the pages directory.
        """
        return self._pages_dir

    @property
    def routes(self):
        """ The current route table (a tuple of ``Route`` objects).
        """
        return self._snapshot.routes

    @property
    def default_page(self):
        """ The route of the default page, or None.
        """
        return self._snapshot.default_page

    @property
    def reload_count(self):
        """ The number of times that the table was successfully (re)loaded.
        """
        return self._reload_count

    def snapshot(self):
        """ Get a ``Snapshot`` with ``routes`` and ``default_page`` that
        belong together.
        """
        return self._snapshot

    def reload(self):
        """ Rebuild the route table from the pages directory. If this fails,
        the error is logged and the previous table stays active. Returns
        whether the reload succeeded.
        """
        with self._lock:
            try:
                routes = scan_pages(self._pages_dir)
                snapshot = Snapshot(routes, find_default_page(routes))
            except Exception as err:
                logger.error(f"Failed to load pages: {err}", exc_info=err)
                return False
            self._snapshot = snapshot
            self._reload_count += 1

        what = "Loaded" if self._reload_count == 1 else "Reloaded"
        logger.info(f"{what} {len(routes)} routes from {self._pages_dir}")
        for line in format_routes(routes):
            logger.info(line)
        if snapshot.default_page is not None:
            logger.info(f"Default page: {snapshot.default_page.file_path}")
        return True


class Debouncer:
    """ Call a function once after a burst of signals. Each call to
    ``signal()`` (re)starts a timer of ``delay`` seconds. Calls to the
    function never overlap.
    """

    def __init__(self, callback, delay=0.1):
        if not callable(callback):
            raise TypeError("Debouncer callback must be callable.")
        self._callback = callback
        self._delay = float(delay)
        self._lock = threading.Lock()
        self._call_lock = threading.Lock()
        self._timer = None

    @property
    def pending(self):
        """ Whether a call is scheduled.
        """
        return self._timer is not None

    def signal(self):
        """ Schedule a call, postponing an already scheduled call.
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self):
        """ Cancel the scheduled call, if any.
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self):
        with self._lock:
            # A newer signal may have replaced us just before we fired
            if self._timer is not threading.current_thread():
                return
            self._timer = None
        with self._call_lock:
            try:
                self._callback()
            except Exception as err:
                logger.error(f"Error in debounced call: {err}", exc_info=err)


def snapshot_tree(root):
    """ Get a dict that maps each path in the given directory (including
    the directory itself) to its modification time and size. Returns an
    empty dict if the directory does not exist.
    """
    state = {}
    try:
        st = os.stat(root)
    except OSError:
        return state
    state[root] = st.st_mtime_ns, st.st_size
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            path = os.path.join(dirpath, name)
            try:
                st = os.stat(path)
            except OSError:
                continue  # Removed while we were walking
            state[path] = st.st_mtime_ns, st.st_size
    return state


class PagesWatcher:
    """ Watch a pages directory for changes by polling it every ``interval``
    seconds, and call ``on_change()`` (debounced with ``delay``) when
    something was added, removed or modified. Runs in a daemon thread;
    use ``start()`` and ``stop()``, or use the object as a context manager.
    """

    def __init__(self, pages_dir, on_change, *, interval=0.5, delay=0.1):
        self._pages_dir = os.path.abspath(os.fspath(pages_dir))
        self._interval = float(interval)
        self._debouncer = Debouncer(on_change, delay)
        self._stop_event = threading.Event()
        self._thread = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.stop()

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """ Start watching.
        """
        if self.running:
            raise RuntimeError("PagesWatcher is already running.")
        # One event per run: a thread still scanning after stop() keeps its own
        self._stop_event = threading.Event()
        state = snapshot_tree(self._pages_dir)
        self._thread = threading.Thread(
            target=self._run,
            args=(state, self._stop_event),
            name="begone-watcher",
            daemon=True,
        )
        self._thread.start()
        return self

    def stop(self, timeout=5):
        """ Stop watching, and cancel a pending change notification.
        Waits at most ``timeout`` seconds for the thread to finish; with
        a timeout of zero this does not block.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self._debouncer.cancel()

    def _run(self, state, stop_event):
        while not stop_event.wait(self._interval):
            t0 = time.perf_counter()
            new_state = snapshot_tree(self._pages_dir)
            if stop_event.is_set():
                break
            if new_state != state:
                state = new_state
                logger.info("Pages changed, rescanning ...")
                self._debouncer.signal()
            elapsed = time.perf_counter() - t0
            if elapsed > self._interval:
                logger.warning(f"Scanning for changes took {elapsed:0.2f}s")


def watch_pages(table, *, interval=0.5, delay=0.1):
    """ Start watching the pages directory of the given ``PageTable``,
    reloading it on changes. Returns the (started) ``PagesWatcher``.
    """
    watcher = PagesWatcher(
        table.pages_dir, table.reload, interval=interval, delay=delay
    )
    return watcher.start()
