"""Android package list: uid lookups by package name and back."""

from __future__ import annotations

import abc
import os
import re
import threading
import xml.etree.ElementTree as ET
from typing import Dict, Optional, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

PACKAGES_PATH = "/data/system/packages.xml"

_UINT32 = 0xFFFFFFFF
_UNSIGNED = re.compile(r"[0-9]+")
_RELOAD_EVENTS = frozenset({"created", "modified", "moved", "deleted", "closed"})


def _local_name(name: str) -> str:
    return name.rpartition("}")[2]


def _parse_uid(text: str) -> int:
    if not _UNSIGNED.fullmatch(text) or int(text) > _UINT32:
        raise ValueError(f"invalid user id: {text!r}")
    return int(text)


class PackageManagerCallback(abc.ABC):
    """Receives package list updates and background errors."""

    @abc.abstractmethod
    def on_packages_updated(self, packages: int, shared_users: int) -> None:
        """Called after each successful reload with the number of entries."""

    @abc.abstractmethod
    def new_error(self, error: BaseException) -> None:
        """Called with errors raised while watching or reloading."""


class _PackagesFileHandler(FileSystemEventHandler):
    def __init__(self, manager: "PackageManager") -> None:
        super().__init__()
        self._manager = manager
        self._path = os.path.abspath(manager.path)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _RELOAD_EVENTS:
            return
        paths = {os.fsdecode(event.src_path), os.fsdecode(getattr(event, "dest_path", "") or "")}
        if self._path in {os.path.abspath(p) for p in paths if p}:
            self._manager._reload_in_background()


class PackageManager:
    """Reads the system package list and keeps it current as the file changes."""

    def __init__(self, callback: PackageManagerCallback, path: str = PACKAGES_PATH) -> None:
        self.callback = callback
        self.path = path
        self._observer: Optional[Observer] = None
        self._lock = threading.Lock()
        self._id_by_package: Dict[str, int] = {}
        self._shared_by_package: Dict[str, int] = {}
        self._package_by_id: Dict[int, str] = {}
        self._shared_by_id: Dict[int, str] = {}

    def start(self) -> None:
        """Load the package list, then watch it for changes.

        Failing to read the list raises; failing to watch it is reported to
        the callback.
        """
        self.update_packages()
        try:
            observer = Observer()
            observer.schedule(_PackagesFileHandler(self), os.path.dirname(os.path.abspath(self.path)))
            observer.start()
        except Exception as err:  # noqa: BLE001 - reported, not fatal
            self.callback.new_error(err)
            return
        self._observer = observer

    def close(self) -> None:
        """Stop watching the package list."""
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            observer.join()

    def __enter__(self) -> "PackageManager":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _reload_in_background(self) -> None:
        try:
            self.update_packages()
        except Exception as err:  # noqa: BLE001 - reported to the callback
            self.callback.new_error(err)

    def update_packages(self) -> None:
        """Read and decode the package list file."""
        with open(self.path, "rb") as handle:
            data = handle.read()
        self.decode_packages(data)

    def decode_packages(self, data: Union[bytes, str]) -> None:
        """Replace the lookup tables with those found in an XML package list."""
        root = ET.fromstring(data)
        id_by_package: Dict[str, int] = {}
        shared_by_package: Dict[str, int] = {}
        package_by_id: Dict[int, str] = {}
        shared_by_id: Dict[int, str] = {}
        for element in root.iter():
            if not isinstance(element.tag, str):
                continue
            tag = _local_name(element.tag)
            if tag == "package":
                name = ""
                user_id = 0
                for key, value in element.attrib.items():
                    key = _local_name(key)
                    if key == "name":
                        name = value
                    elif key in ("userId", "sharedUserId"):
                        user_id = _parse_uid(value)
                if user_id == 0 and name == "":
                    continue
                id_by_package[name] = user_id
                package_by_id[user_id] = name
            elif tag == "shared-user":
                name = ""
                user_id = 0
                for key, value in element.attrib.items():
                    key = _local_name(key)
                    if key == "name":
                        name = value
                    elif key == "userId":
                        user_id = _parse_uid(value)
                        package_by_id[user_id] = name
                if user_id == 0 and name == "":
                    continue
                shared_by_package[name] = user_id
                shared_by_id[user_id] = name
        with self._lock:
            self._id_by_package = id_by_package
            self._shared_by_package = shared_by_package
            self._package_by_id = package_by_id
            self._shared_by_id = shared_by_id
        self.callback.on_packages_updated(len(package_by_id), len(shared_by_id))

    def id_by_package(self, package_name: str) -> Optional[int]:
        """Return the uid of a package, or None."""
        return self._id_by_package.get(package_name)

    def id_by_shared_package(self, shared_package: str) -> Optional[int]:
        """Return the uid of a shared user, or None."""
        return self._shared_by_package.get(shared_package)

    def package_by_id(self, uid: int) -> Optional[str]:
        """Return the package name owning a uid, or None."""
        return self._package_by_id.get(uid)

    def shared_package_by_id(self, uid: int) -> Optional[str]:
        """Return the shared user name owning a uid, or None."""
        return self._shared_by_id.get(uid)