"""
Tests for interface lifecycle.

Проверяет:
- Значения по умолчанию при создании (apply_interface_defaults)
- Перехват neighbor в update_interface
- Удаление интерфейса без висячих ссылок
"""

from unittest.mock import patch

import pytest

from netinventory.core.config_schema import PolicyConfig
from netinventory.core.exceptions import NotFoundError, ValidationError
from netinventory.store import MemoryStore
from netinventory.sync import InterfaceReconciler, apply_interface_defaults


@pytest.mark.unit
class TestApplyInterfaceDefaults:
    """Тесты чистой функции значений по умолчанию."""

    def test_defaults_from_policy(self):
        policy = PolicyConfig(if_snmp=False, if_overwrite_descr=False, update_device_ip_names=True)
        result = apply_interface_defaults({"device": 1}, policy, unknown_status_id=5)

        assert result == {
            "device": 1,
            "speed": 0,
            "doc_status": "manual",
            "snmp_managed": False,
            "overwrite_descr": False,
            "monitored": False,
            "auto_dns": True,
            "monitorstatus": 5,
        }

    def test_explicit_values_kept(self):
        fields = {
            "device": 1,
            "speed": 100000000,
            "doc_status": "snmp",
            "snmp_managed": False,
            "monitorstatus": 1,
        }
        result = apply_interface_defaults(fields, PolicyConfig(), unknown_status_id=5)

        assert result["speed"] == 100000000
        assert result["doc_status"] == "snmp"
        assert result["snmp_managed"] is False
        assert result["monitorstatus"] == 1

    def test_none_treated_as_missing(self):
        result = apply_interface_defaults({"device": 1, "speed": None}, PolicyConfig())
        assert result["speed"] == 0
        assert result["monitorstatus"] == 0

    def test_input_not_mutated(self):
        fields = {"device": 1}
        apply_interface_defaults(fields, PolicyConfig())
        assert fields == {"device": 1}


@pytest.mark.integration
class TestCreateInterface:
    """Тесты create_interface."""

    def test_defaults(self, reconciler, switch):
        intf = reconciler.create_interface({"device": switch.id, "name": "Gi0/1"})

        assert intf.id > 0
        assert intf.speed == 0
        assert intf.doc_status == "manual"
        assert intf.snmp_managed is True
        assert intf.overwrite_descr is True
        assert intf.monitored is False
        assert intf.auto_dns is False
        # "Unknown" ищется по имени
        assert intf.monitorstatus == 2

    def test_no_unknown_status(self):
        store = MemoryStore()
        device = store.insert("device", {"name": "sw1"})
        intf = InterfaceReconciler(store).create_interface({"device": device.id})
        assert intf.monitorstatus == 0

    def test_missing_device(self, reconciler):
        with pytest.raises(ValidationError) as exc_info:
            reconciler.create_interface({"name": "Gi0/1"})
        assert exc_info.value.field == "device"

    def test_unknown_field(self, reconciler, switch):
        with pytest.raises(ValidationError):
            reconciler.create_interface({"device": switch.id, "colour": "red"})

    def test_number_stored_as_string(self, reconciler, switch):
        intf = reconciler.create_interface({"device": switch.id, "number": 10})
        assert intf.number == "10"
        assert reconciler.store.find_one("interface", device=switch.id, number="10").id == intf.id

    def test_with_neighbor(self, reconciler, make_interface, switch, router):
        a = make_interface(switch, "Gi0/1")
        b = reconciler.create_interface({"device": router.id, "name": "Gi0/0", "neighbor": a.id})

        assert b.neighbor == a.id
        assert reconciler.store.find_by_id("interface", a.id).neighbor == b.id


@pytest.mark.integration
class TestUpdateInterface:
    """Тесты update_interface."""

    def test_plain_fields(self, reconciler, make_interface, switch):
        intf = make_interface(switch, "Gi0/1")
        updated = reconciler.update_interface(intf.id, {"description": "server", "monitored": True})
        assert updated.description == "server"
        assert updated.monitored is True

    def test_neighbor_routed_to_add_neighbor(self, reconciler, make_interface, switch, router):
        a = make_interface(switch, "Gi0/1")
        b = make_interface(router, "Gi0/0")

        with patch.object(reconciler, "add_neighbor", wraps=reconciler.add_neighbor) as add_mock:
            updated = reconciler.update_interface(
                a.id, {"neighbor": b.id, "neighbor_fixed": True, "description": "uplink"}
            )

        add_mock.assert_called_once_with(a.id, b.id, fixed=True)
        assert updated.neighbor == b.id
        assert updated.neighbor_fixed is True
        assert updated.description == "uplink"
        peer = reconciler.store.find_by_id("interface", b.id)
        assert (peer.neighbor, peer.neighbor_fixed) == (a.id, True)

    def test_neighbor_zero_routed_to_remove_neighbor(self, reconciler, make_interface, switch, router):
        a = make_interface(switch, "Gi0/1")
        b = make_interface(router, "Gi0/0")
        reconciler.add_neighbor(a.id, b.id, fixed=True)

        with patch.object(reconciler, "remove_neighbor", wraps=reconciler.remove_neighbor) as remove_mock:
            reconciler.update_interface(a.id, {"neighbor": 0})

        remove_mock.assert_called_once_with(a.id)
        for record_id in (a.id, b.id):
            intf = reconciler.store.find_by_id("interface", record_id)
            assert (intf.neighbor, intf.neighbor_fixed) == (0, False)

    def test_store_update_without_neighbor_keys(self, reconciler, make_interface, switch, router):
        """neighbor и neighbor_fixed не уходят в хранилище напрямую."""
        a = make_interface(switch, "Gi0/1")
        b = make_interface(router, "Gi0/0")

        with patch.object(reconciler.store, "update", wraps=reconciler.store.update) as update_mock:
            reconciler.update_interface(a.id, {"neighbor": b.id, "neighbor_fixed": False, "monitored": True})

        direct_calls = [c for c in update_mock.call_args_list if c.args[2] == {"monitored": True}]
        assert len(direct_calls) == 1

    def test_number_stored_as_string(self, reconciler, make_interface, switch):
        intf = make_interface(switch, "Gi0/1")
        updated = reconciler.update_interface(intf.id, {"number": 11})
        assert updated.number == "11"

    def test_missing_interface(self, reconciler):
        with pytest.raises(NotFoundError):
            reconciler.update_interface(999, {"description": "x"})


@pytest.mark.integration
class TestDeleteInterface:
    """Тесты delete_interface."""

    def test_clears_neighbor(self, reconciler, make_interface, switch, router):
        a = make_interface(switch, "Gi0/1")
        b = make_interface(router, "Gi0/0")
        reconciler.add_neighbor(a.id, b.id, fixed=True)

        reconciler.delete_interface(a.id)

        peer = reconciler.store.find_by_id("interface", b.id)
        assert (peer.neighbor, peer.neighbor_fixed, peer.neighbor_missed) == (0, False, 0)
        with pytest.raises(NotFoundError):
            reconciler.store.find_by_id("interface", a.id)

    def test_clears_one_sided_pointer(self, reconciler, make_interface, switch, router):
        """Указатель без обратной связи тоже сбрасывается."""
        a = make_interface(switch, "Gi0/1")
        b = make_interface(router, "Gi0/0")
        reconciler.store.update("interface", b.id, {"neighbor": a.id, "neighbor_missed": 3})

        reconciler.delete_interface(a.id)

        peer = reconciler.store.find_by_id("interface", b.id)
        assert (peer.neighbor, peer.neighbor_missed) == (0, 0)

    def test_removes_memberships_and_detaches_ips(self, reconciler, make_interface, switch):
        store = reconciler.store
        a = make_interface(switch, "Gi0/1")
        vlan = store.insert("vlan", {"vid": 10})
        store.insert("interfacevlan", {"interface": a.id, "vlan": vlan.id})
        ip = store.insert("ipblock", {"address": "10.0.0.1", "prefix": 32, "status": "Static", "interface": a.id})

        reconciler.delete_interface(a.id)

        assert store.search("interfacevlan", interface=a.id) == []
        assert store.find_by_id("ipblock", ip.id).interface is None
        assert store.find_one("vlan", vid=10) is not None

    def test_neighbor_lock_released(self, reconciler, make_interface, switch, router):
        a = make_interface(switch, "Gi0/1")
        b = make_interface(router, "Gi0/0")
        reconciler.add_neighbor(a.id, b.id)
        assert a.id in reconciler._neighbor_locks

        reconciler.delete_interface(a.id)

        assert a.id not in reconciler._neighbor_locks
        assert b.id in reconciler._neighbor_locks

    def test_missing(self, reconciler):
        with pytest.raises(NotFoundError):
            reconciler.delete_interface(999)
