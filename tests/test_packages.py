import time

import pytest

from singtun.packages import PackageManager, PackageManagerCallback

PACKAGES_XML = """<?xml version="1.0" encoding="utf-8"?>
<packages>
  <package name="com.example.app" userId="10123" codePath="/data/app/one"/>
  <package name="com.example.shared" sharedUserId="1000"/>
  <package codePath="/data/app/none"/>
  <shared-user name="android.uid.system" userId="1000"/>
  <shared-user name="android.uid.phone" userId="1001"/>
</packages>
"""


class Recorder(PackageManagerCallback):
    def __init__(self):
        self.updates = []
        self.errors = []

    def on_packages_updated(self, packages, shared_users):
        self.updates.append((packages, shared_users))

    def new_error(self, error):
        self.errors.append(error)


def make_manager(path="unused.xml"):
    recorder = Recorder()
    return PackageManager(recorder, path=path), recorder


def test_decode_package_lookups():
    manager, _ = make_manager()
    manager.decode_packages(PACKAGES_XML)
    assert manager.id_by_package("com.example.app") == 10123
    assert manager.package_by_id(10123) == "com.example.app"
    assert manager.id_by_package("com.example.shared") == 1000


def test_decode_shared_user_lookups():
    manager, _ = make_manager()
    manager.decode_packages(PACKAGES_XML)
    assert manager.id_by_shared_package("android.uid.system") == 1000
    assert manager.shared_package_by_id(1001) == "android.uid.phone"
    assert manager.package_by_id(1001) == "android.uid.phone"


def test_decode_reports_counts():
    manager, recorder = make_manager()
    manager.decode_packages(PACKAGES_XML)
    # package_by_id: 10123, 1000, 1001; shared: 1000, 1001
    assert recorder.updates == [(3, 2)]


def test_unknown_lookups_return_none():
    manager, _ = make_manager()
    manager.decode_packages(PACKAGES_XML)
    assert manager.id_by_package("missing") is None
    assert manager.shared_package_by_id(42) is None


def test_package_without_name_or_id_is_skipped():
    manager, _ = make_manager()
    manager.decode_packages(PACKAGES_XML)
    assert manager.id_by_package("") is None
    assert manager.package_by_id(0) is None


def test_invalid_user_id_raises():
    manager, _ = make_manager()
    with pytest.raises(ValueError):
        manager.decode_packages('<packages><package name="a" userId="x"/></packages>')


def test_user_id_out_of_range_raises():
    manager, _ = make_manager()
    with pytest.raises(ValueError):
        manager.decode_packages('<packages><package name="a" userId="4294967296"/></packages>')


def test_decode_replaces_previous_tables():
    manager, _ = make_manager()
    manager.decode_packages(PACKAGES_XML)
    manager.decode_packages('<packages><package name="b" userId="5"/></packages>')
    assert manager.id_by_package("com.example.app") is None
    assert manager.id_by_package("b") == 5


def test_start_missing_file_raises(tmp_path):
    manager, _ = make_manager(str(tmp_path / "packages.xml"))
    with pytest.raises(FileNotFoundError):
        manager.start()


def test_start_loads_and_reloads_on_change(tmp_path):
    path = tmp_path / "packages.xml"
    path.write_text(PACKAGES_XML)
    manager, recorder = make_manager(str(path))
    manager.start()
    try:
        assert manager.id_by_package("com.example.app") == 10123
        path.write_text('<packages><package name="b" userId="7"/></packages>')
        deadline = time.monotonic() + 5
        while manager.id_by_package("b") is None and time.monotonic() < deadline:
            time.sleep(0.05)
        assert manager.id_by_package("b") == 7
    finally:
        manager.close()
    assert recorder.updates[0] == (3, 2)