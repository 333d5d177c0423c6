# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for client rendering and batch generation."""

import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

import pytest

from specbind.compiler.artifact import read_artifact
from specbind.compiler.build import compile_directory
from specbind.generator.generate import GenerationError, GeneratorOptions, generate, output_paths
from specbind.generator.render import RenderOptions, render_interface
from specbind.model.entities import Api, Argument, Interface, Method, Property
from specbind.props.variant import ObjectPath, Variant, VariantKind
from specbind.runtime.client import PropertyChanged, PropertyNotWritable
from specbind.runtime.transport import OBJECT_MANAGER_INTERFACE, PROPERTIES_INTERFACE

# ###############
# Test Helpers
# ###############


@pytest.fixture
def api(docs_dir: Path) -> Api:
    return compile_directory(docs_dir)


def _render(api: Api, name: str, options: RenderOptions | None = None) -> str:
    interface = api.get(name)
    assert interface is not None
    return render_interface(interface, options)


def _load(path: Path, name: str, monkeypatch: pytest.MonkeyPatch) -> ModuleType:
    """Import a generated module from *path* under the module name *name*."""
    spec = importlib.util.spec_from_file_location(name, path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    monkeypatch.setitem(sys.modules, name, module)
    spec.loader.exec_module(module)
    return module


# ###############
# Rendering
# ###############


class TestRender:
    def test_generated_modules_compile(self, api: Api) -> None:
        for name in api.names():
            compile(_render(api, name), f"{name}.py", "exec")

    def test_rendering_is_deterministic(self, api: Api) -> None:
        assert _render(api, "org.bluez.Adapter1") == _render(api, "org.bluez.Adapter1")

    def test_header_and_constants(self, api: Api) -> None:
        text = _render(api, "org.bluez.MediaTransport1")
        assert text.startswith("# Code generated by specbind. DO NOT EDIT.\n# Source: media-api.txt:8\n")
        assert 'INTERFACE = "org.bluez.MediaTransport1"' in text
        assert 'service = "org.bluez"' in text
        assert text.endswith("\n")
        assert not text.endswith("\n\n")

    def test_properties_record(self, api: Api) -> None:
        text = _render(api, "org.bluez.MediaTransport1")
        assert "class MediaTransport1Properties(PropertiesRecord):" in text
        assert 'Device: ObjectPath = prop(default=ObjectPath(""))' in text
        assert 'Configuration: bytes = prop(default=b"")' in text
        assert "Volume: UInt16 = prop(writable=True, default=0)" in text

    def test_accessors_follow_writability(self, api: Api) -> None:
        text = _render(api, "org.bluez.Adapter1")
        assert "def get_alias(self) -> str:" in text
        assert "def set_alias(self, value: str) -> None:" in text
        assert "def get_name(self) -> str:" in text
        assert "def set_name(" not in text
        assert "def get_uuids(self) -> list[str]:" in text

    def test_method_signatures(self, api: Api) -> None:
        media = _render(api, "org.bluez.MediaTransport1")
        assert "def acquire(self) -> tuple[int, int, int]:" in media
        assert 'ret0, ret1, ret2 = self.call("Acquire")' in media
        assert "def release(self) -> None:" in media
        adapter = _render(api, "org.bluez.Adapter1")
        assert "def remove_device(self, device: ObjectPath) -> None:" in adapter
        assert "def get_discovery_filters(self) -> list[str]:" in adapter
        assert '(ret0,) = self.call("GetDiscoveryFilters")' in adapter

    def test_short_id_constructor(self, api: Api) -> None:
        text = _render(api, "org.bluez.Adapter1")
        assert "def from_adapter_id(" in text
        assert 'adapter_id: str = "hci0",' in text
        assert 'return cls(transport, f"/org/bluez/{adapter_id}", load_properties=load_properties)' in text

    def test_short_id_can_be_disabled(self, api: Api) -> None:
        text = _render(api, "org.bluez.Adapter1", RenderOptions(short_id=None))
        assert "from_adapter_id" not in text
        assert "def watch_objects" not in text

    def test_fixed_path_becomes_default(self, api: Api) -> None:
        text = _render(api, "org.bluez.AgentManager1")
        assert 'object_path: str = "/org/bluez",' in text
        assert "def watch_objects(self)" in text
        assert "def watch_properties" not in text

    def test_hierarchy_roots(self, api: Api) -> None:
        assert "def watch_objects(self)" in _render(api, "org.bluez.Device1")
        assert "def watch_objects(self)" not in _render(api, "org.bluez.MediaTransport1")

    def test_reserved_and_keyword_names_are_suffixed(self) -> None:
        interface = Interface(
            name="org.example.Odd1",
            properties={"Properties": Property(type="string", name="Properties", docs="Clash.")},
            methods=[
                Method(name="Close"),
                Method(name="Lambda", arguments=[Argument(type="string", name="class")]),
            ],
        )
        text = render_interface(interface)
        assert "def get_properties_(self) -> str:" in text
        assert "def close_(self) -> None:" in text
        assert "def lambda_(self, class_: str) -> None:" in text
        compile(text, "odd1.py", "exec")

    def test_unusable_property_names_are_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        interface = Interface(
            name="org.example.Odd1",
            properties={
                "Bad-Name": Property(type="string", name="Bad-Name", docs="x"),
                "lock": Property(type="string", name="lock", docs="x"),
                "Good": Property(type="string", name="Good", docs="x"),
            },
        )
        with caplog.at_level(logging.WARNING, logger="specbind.generator.render"):
            text = render_interface(interface)
        assert "Good: str" in text
        assert "Bad-Name" not in text
        assert "lock: str" not in text
        assert "'Bad-Name' has no usable field name" in caplog.text

    def test_docs_are_escaped(self) -> None:
        interface = Interface(
            name="org.example.Quote1",
            methods=[Method(name="Say", docs='Says """hi""" and \\n "quoted"')],
        )
        text = render_interface(interface)
        compile(text, "quote1.py", "exec")
        assert '\\"\\"\\"hi' in text


# ###############
# Batch Generation
# ###############


class TestGenerate:
    def test_module_layout(self, api: Api, tmp_path: Path) -> None:
        result = generate(api, tmp_path)
        bluez = tmp_path / "org" / "bluez"
        assert sorted(p.name for p in bluez.glob("*.py")) == [
            "__init__.py",
            "adapter1.py",
            "agent_manager1.py",
            "device1.py",
            "media_transport1.py",
        ]
        assert (tmp_path / "org" / "__init__.py").read_text() == ""
        assert len(result.written) == 6
        assert result.unchanged == []

    def test_second_run_writes_nothing(self, api: Api, tmp_path: Path) -> None:
        generate(api, tmp_path)
        before = {p: p.read_bytes() for p in tmp_path.rglob("*.py")}
        result = generate(api, tmp_path)
        assert result.written == []
        assert len(result.unchanged) == 4
        assert {p: p.read_bytes() for p in tmp_path.rglob("*.py")} == before

    def test_changed_files_are_rewritten(self, api: Api, tmp_path: Path) -> None:
        generate(api, tmp_path)
        target = tmp_path / "org" / "bluez" / "device1.py"
        target.write_text("# edited\n", encoding="utf-8")
        result = generate(api, tmp_path)
        assert result.written == [target]
        assert target.read_text(encoding="utf-8").startswith("# Code generated by specbind")

    def test_artifact_is_written(self, api: Api, tmp_path: Path) -> None:
        generate(api, tmp_path, GeneratorOptions(artifact=Path("bluez.api.json")))
        assert read_artifact(tmp_path / "bluez.api.json") == api

    def test_path_collision_writes_nothing(self, tmp_path: Path) -> None:
        api = Api(interfaces=[Interface(name="org.Example.Foo1"), Interface(name="org.example.Foo1")])
        with pytest.raises(GenerationError, match="both map to 'org/example/foo1.py'"):
            generate(api, tmp_path / "out")
        assert not (tmp_path / "out").exists()

    def test_output_paths(self, api: Api) -> None:
        paths = output_paths(api)
        assert str(paths["org.bluez.MediaTransport1"]) == "org/bluez/media_transport1.py"


# ###############
# Generated Clients
# ###############

DEVICE_PATH = "/org/bluez/hci0/dev_00_11_22_33_44_55"


class TestGeneratedClients:
    @pytest.fixture
    def modules(self, api: Api, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, ModuleType]:
        generate(api, tmp_path)
        bluez = tmp_path / "org" / "bluez"
        return {
            path.stem: _load(path, f"generated_bluez_{path.stem}", monkeypatch)
            for path in sorted(bluez.glob("*.py"))
            if path.stem != "__init__"
        }

    def test_device_client(self, modules: dict[str, ModuleType], transport: Any) -> None:
        transport.objects[(DEVICE_PATH, "org.bluez.Device1")] = {
            "Address": "00:11:22:33:44:55",
            "Alias": "Headset",
            "Paired": True,
            "Connected": False,
            "RSSI": Variant(VariantKind.INT16, -50),
            "Adapter": ObjectPath("/org/bluez/hci0"),
            "ManufacturerData": {"76": b"\x01"},
        }
        device = modules["device1"].Device1(transport, DEVICE_PATH)
        assert device.properties.RSSI == -50
        assert device.properties.Adapter == "/org/bluez/hci0"
        assert device.properties.ManufacturerData == {"76": b"\x01"}

        device.set_alias("Speaker")
        assert device.get_alias() == "Speaker"
        with pytest.raises(PropertyNotWritable):
            device.set_property("Paired", False)

        device.connect()
        assert transport.methods_called("org.bluez.Device1") == ["Connect"]

    def test_device_events(self, modules: dict[str, ModuleType], transport: Any) -> None:
        device = modules["device1"].Device1(transport, DEVICE_PATH, load_properties=False)
        with device:
            changes = device.watch_properties()
            transport.emit(
                DEVICE_PATH, PROPERTIES_INTERFACE, "PropertiesChanged", "org.bluez.Device1", {"Connected": True}, []
            )
            assert changes.get(timeout=1) == PropertyChanged("org.bluez.Device1", "Connected", True)
            assert device.properties.Connected is True

            objects = device.watch_objects()
            transport.emit(
                "/",
                OBJECT_MANAGER_INTERFACE,
                "InterfacesAdded",
                ObjectPath(f"{DEVICE_PATH}/fd0"),
                {"org.bluez.MediaTransport1": {}},
            )
            assert objects.get(timeout=1).interfaces == ("org.bluez.MediaTransport1",)
        assert transport.registrations == []

    def test_adapter_client(self, modules: dict[str, ModuleType], transport: Any) -> None:
        adapter = modules["adapter1"].Adapter1.from_adapter_id(transport, "hci1")
        assert adapter.path == "/org/bluez/hci1"
        assert adapter.properties.UUIDs == []

        transport.replies["GetDiscoveryFilters"] = (["RSSI", "Pathloss"],)
        assert adapter.get_discovery_filters() == ["RSSI", "Pathloss"]

        adapter.remove_device(ObjectPath("/org/bluez/hci1/dev_1"))
        assert transport.calls[-1] == (
            "/org/bluez/hci1",
            "org.bluez.Adapter1",
            "RemoveDevice",
            ("/org/bluez/hci1/dev_1",),
        )

        adapter.set_powered(True)
        assert transport.objects[("/org/bluez/hci1", "org.bluez.Adapter1")]["Powered"] is True

    def test_agent_manager_default_path(self, modules: dict[str, ModuleType], transport: Any) -> None:
        manager = modules["agent_manager1"].AgentManager1(transport)
        assert manager.path == "/org/bluez"
        manager.register_agent(ObjectPath("/test/agent"), "KeyboardDisplay")
        assert transport.calls == [
            ("/org/bluez", "org.bluez.AgentManager1", "RegisterAgent", ("/test/agent", "KeyboardDisplay")),
        ]

    def test_media_transport_multiple_returns(self, modules: dict[str, ModuleType], transport: Any) -> None:
        media = modules["media_transport1"].MediaTransport1(transport, f"{DEVICE_PATH}/fd0", load_properties=False)
        transport.replies["Acquire"] = (7, 672, 672)
        assert media.acquire() == (7, 672, 672)
        assert not hasattr(media, "watch_objects")
