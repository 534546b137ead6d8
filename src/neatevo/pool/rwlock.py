"""
Readers-Writer Lock Module

Classes:
    RWLock: Lock allowing concurrent readers or a single exclusive writer
"""

import threading
from contextlib import contextmanager

class RWLock:
    """
    A readers-writer lock.

    Any number of threads may hold the lock for reading at the same time;
    a writer holds it exclusively. Waiting writers take precedence over new
    readers, so a steady stream of readers cannot starve a writer.
    The lock is not reentrant.

    Public Methods:
        read():  Context manager acquiring the lock for reading
        write(): Context manager acquiring the lock for writing
    """

    def __init__(self):
        self._condition       = threading.Condition(threading.Lock())
        self._readers         = 0      # number of threads currently reading
        self._writer          = False  # whether a thread is currently writing
        self._writers_waiting = 0

    @contextmanager
    def read(self):
        with self._condition:
            while self._writer or self._writers_waiting:
                self._condition.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @contextmanager
    def write(self):
        with self._condition:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._condition.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._condition:
                self._writer = False
                self._condition.notify_all()
