"""
Pytest configuration и общие fixtures для тестов.

Предоставляет переиспользуемые fixtures:
- store: MemoryStore с MonitorStatus и двумя устройствами
- router / switch: Устройства (L3 и L2)
- reconciler: InterfaceReconciler поверх store
- make_interface: Фабрика интерфейсов
- snmp_interface: Пример данных опроса в формате SNMP info
"""

import pytest
from typing import Dict, Any

from netinventory.core.config_schema import PolicyConfig
from netinventory.core.context import RunContext
from netinventory.store import MemoryStore
from netinventory.sync import InterfaceReconciler

ROUTER_OID = "1.3.6.1.4.1.9.1.1"
SWITCH_OID = "1.3.6.1.4.1.9.1.1208"


@pytest.fixture
def store() -> MemoryStore:
    """
    MemoryStore с базовыми данными.

    MonitorStatus "Unknown" создаётся вторым (id=2), чтобы тесты
    проверяли поиск по имени, а не по id.
    """
    store = MemoryStore()
    store.insert("monitorstatus", {"name": "Up"})
    store.insert("monitorstatus", {"name": "Unknown"})
    store.insert("device", {
        "name": "rtr1",
        "ipforwarding": True,
        "owner": 100,
        "used_by": 200,
        "sysobjectid": ROUTER_OID,
    })
    store.insert("device", {
        "name": "sw1",
        "ipforwarding": False,
        "sysobjectid": SWITCH_OID,
    })
    return store


@pytest.fixture
def router(store):
    return store.find_one("device", name="rtr1")


@pytest.fixture
def switch(store):
    return store.find_one("device", name="sw1")


@pytest.fixture
def policy() -> PolicyConfig:
    return PolicyConfig()


@pytest.fixture
def reconciler(store, policy) -> InterfaceReconciler:
    """InterfaceReconciler с тестовым контекстом выполнения."""
    ctx = RunContext.create(triggered_by="test")
    return InterfaceReconciler(store, policy=policy, context=ctx)


@pytest.fixture
def make_interface(reconciler):
    """
    Фабрика интерфейсов.

    Usage:
        intf = make_interface(switch, "Gi0/1", number="1", oper_status="up")
    """
    counter = {"n": 0}

    def _make(device, name: str, **fields):
        counter["n"] += 1
        data = {"device": device.id, "name": name, "number": str(counter["n"])}
        data.update(fields)
        return reconciler.create_interface(data)
    return _make


@pytest.fixture
def snmp_interface() -> Dict[str, Any]:
    """
    Данные опроса одного интерфейса в формате SNMP info.

    Returns:
        Dict: number, скалярные поля, physaddr, vlans, ips
    """
    return {
        "number": "10",
        "name": "GigabitEthernet0/10",
        "type": "ethernetCsmacd",
        "description": "uplink to core",
        "speed": 1000000000,
        "admin_status": "up",
        "oper_status": "up",
        "oper_duplex": "full",
        "physaddr": "0011.2233.4455",
        "vlans": {
            "10": {"vid": 10, "vname": "users"},
            "20": {"vid": 20, "vname": "voice"},
        },
        "ips": {
            "10.0.0.5": {"address": "10.0.0.5", "mask": "255.255.255.252"},
        },
    }


def pytest_configure(config):
    """Регистрация custom markers для pytest."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (быстрые, без внешних зависимостей)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (reconciler + MemoryStore)"
    )
