"""Durable key-value string stores used to persist the login session."""

import json
import logging
import os
import threading

logger = logging.getLogger(__name__)


class MemoryStorage:
    """Process-local store; survives a ``SessionManager`` rebuild, not a process exit."""

    def __init__(self, initial=None):
        self._values = dict(initial or {})

    def get(self, key):
        return self._values.get(key)

    def set(self, key, value):
        self._values[key] = str(value)

    def remove(self, key):
        self._values.pop(key, None)

    def snapshot(self):
        return dict(self._values)


class JsonFileStorage:
    """Keys and string values kept in one JSON object on disk."""

    def __init__(self, path):
        self.path = path
        self._lock = threading.Lock()

    def _read(self):
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Could not read session storage %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data):
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            tmp_path = f"{self.path}.tmp"
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.warning("Could not write session storage %s: %s", self.path, e)

    def get(self, key):
        with self._lock:
            value = self._read().get(key)
        return None if value is None else str(value)

    def set(self, key, value):
        with self._lock:
            data = self._read()
            data[key] = str(value)
            self._write(data)

    def remove(self, key):
        with self._lock:
            data = self._read()
            if key not in data:
                return
            del data[key]
            self._write(data)
