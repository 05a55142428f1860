"""
Data Models для netinventory.

Типизированные dataclasses вместо Dict[str, Any]:
- Сущности инвентаря (Interface, Vlan, Ipblock, ...) — то что лежит в Store
- Discovery модели (DiscoveredInterface, ...) — уже разобранный снимок опроса
- Результаты синхронизации (ReconcileResult, IPResolution, ...)

Связи между сущностями хранятся как целочисленные ID.
Пустой сосед — 0, остальные пустые ссылки — None.

Использование:
    from netinventory.core.models import DiscoveredInterface

    discovered = DiscoveredInterface.from_dict(snmp_info)
    print(discovered.number, [v.vid for v in discovered.vlans or []])
"""

from dataclasses import dataclass, field, asdict, fields as dataclass_fields
from datetime import datetime
from typing import Optional, List, Any, Dict, Union, Type

from .constants import INTERFACE_STD_FIELDS, DOC_STATUS_MANUAL
from .exceptions import ValidationError
from .domain.speed import format_speed


class _Entity:
    """Общие методы для сущностей хранилища."""

    @classmethod
    def field_names(cls) -> List[str]:
        """Имена полей dataclass."""
        return [f.name for f in dataclass_fields(cls)]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """Создаёт сущность из словаря (лишние ключи игнорируются)."""
        names = set(cls.field_names())
        return cls(**{k: v for k, v in data.items() if k in names})

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        return asdict(self)


# ==================== СУЩНОСТИ ИНВЕНТАРЯ ====================

@dataclass
class Device(_Entity):
    """
    Устройство (только чтение).

    Attributes:
        name: Имя устройства
        ipforwarding: Включена ли маршрутизация (роутер / L3 коммутатор)
        owner: ID организации-владельца
        used_by: ID организации-пользователя
        sysobjectid: sysObjectID продукта
    """
    id: int = 0
    name: str = ""
    ipforwarding: bool = False
    owner: Optional[int] = None
    used_by: Optional[int] = None
    sysobjectid: str = ""

    @property
    def label(self) -> str:
        return self.name or f"device#{self.id}"


@dataclass
class MonitorStatus(_Entity):
    """Статус мониторинга."""
    id: int = 0
    name: str = ""


@dataclass
class Interface(_Entity):
    """
    Интерфейс устройства.

    Attributes:
        device: ID устройства (обязательно)
        number: ifIndex
        speed: Скорость в bps
        physaddr: ID PhysAddr или None
        neighbor: ID интерфейса-соседа (0 = нет соседа)
        neighbor_fixed: Сосед закреплён вручную
        neighbor_missed: Счётчик пропусков соседа топологическим поиском
        overwrite_descr: Разрешено перезаписывать description из discovery
        ignore_ip: Не синхронизировать IP-адреса интерфейса
        doc_status: Источник данных (manual/snmp)
    """
    id: int = 0
    device: int = 0
    number: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    speed: int = 0
    admin_status: Optional[str] = None
    oper_status: Optional[str] = None
    admin_duplex: Optional[str] = None
    oper_duplex: Optional[str] = None
    stp_id: Optional[str] = None
    bpdu_guard_enabled: Optional[bool] = None
    bpdu_filter_enabled: Optional[bool] = None
    loop_guard_enabled: Optional[bool] = None
    root_guard_enabled: Optional[bool] = None
    dp_remote_id: Optional[str] = None
    dp_remote_ip: Optional[str] = None
    dp_remote_port: Optional[str] = None
    dp_remote_type: Optional[str] = None
    physaddr: Optional[int] = None
    neighbor: int = 0
    neighbor_fixed: bool = False
    neighbor_missed: int = 0
    monitored: bool = False
    snmp_managed: bool = False
    overwrite_descr: bool = False
    auto_dns: bool = False
    ignore_ip: bool = False
    doc_status: str = DOC_STATUS_MANUAL
    monitorstatus: int = 0

    @property
    def speed_pretty(self) -> str:
        """Скорость в читаемом виде (T1, 100 Mbps, 1.0 Gbps)."""
        return format_speed(self.speed)


@dataclass
class PhysAddr(_Entity):
    """MAC-адрес (уникален по address)."""
    id: int = 0
    address: str = ""
    static: bool = False
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None


@dataclass
class Vlan(_Entity):
    """VLAN (уникален по vid)."""
    id: int = 0
    vid: int = 0
    name: Optional[str] = None


@dataclass
class InterfaceVlan(_Entity):
    """
    Членство интерфейса во VLAN (уникально по паре interface/vlan).

    STP поля заполняются только если для устройства есть STPInstance.
    """
    id: int = 0
    interface: int = 0
    vlan: int = 0
    stp_instance: Optional[int] = None
    stp_des_bridge: Optional[str] = None
    stp_des_port: Optional[str] = None
    stp_state: Optional[str] = None


@dataclass
class STPInstance(_Entity):
    """STP instance устройства (уникален по device/number)."""
    id: int = 0
    device: int = 0
    number: int = 0


@dataclass
class Ipblock(_Entity):
    """
    IP-блок: адрес хоста (/32, /128) или подсеть.

    Уникален по паре (address, prefix).
    """
    id: int = 0
    address: str = ""
    prefix: int = 0
    version: int = 4
    status: str = ""
    interface: Optional[int] = None
    vlan: Optional[int] = None
    owner: Optional[int] = None
    used_by: Optional[int] = None

    @property
    def cidr(self) -> str:
        return f"{self.address}/{self.prefix}"


# Таблица хранилища → класс сущности
TABLES: Dict[str, Type[_Entity]] = {
    "device": Device,
    "monitorstatus": MonitorStatus,
    "interface": Interface,
    "physaddr": PhysAddr,
    "vlan": Vlan,
    "interfacevlan": InterfaceVlan,
    "stpinstance": STPInstance,
    "ipblock": Ipblock,
}


# ==================== DISCOVERY ====================

def _int_key(value: Any) -> Any:
    """Приводит ключ к int если это число."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def _entry_dict(data: Any, scalar_field: str, section: str) -> Dict[str, Any]:
    """
    Запись секции vlans/ips как словарь.

    Скаляр (VID или адрес) превращается в {scalar_field: значение}.

    Raises:
        ValidationError: Запись не словарь и не скаляр
    """
    if data is None:
        return {}
    if isinstance(data, dict):
        return data
    if isinstance(data, (str, int)) and not isinstance(data, bool):
        return {scalar_field: data}
    raise ValidationError(
        f"Неверная запись секции {section}: {data!r}",
        field=section,
        value=data,
    )


def normalize_stp_instances(
    raw: Optional[Dict[Any, Any]],
) -> Optional[Dict[Any, Dict[str, Dict[Any, Any]]]]:
    """
    Приводит номера STP instance и интерфейсов к int.

    Коллекторы SNMP отдают ключи строками ("0", "10"), синхронизация
    сравнивает их с int.

    Raises:
        ValidationError: Карта не является вложенным словарём

    Examples:
        >>> normalize_stp_instances({"0": {"i_stp_state": {"10": "forwarding"}}})
        {0: {'i_stp_state': {10: 'forwarding'}}}
    """
    if not raw:
        return None
    if not isinstance(raw, dict):
        raise ValidationError("Неверная карта STP instances", field="stp_instances", value=raw)

    result: Dict[Any, Dict[str, Dict[Any, Any]]] = {}
    for inst, maps in raw.items():
        maps = maps or {}
        if not isinstance(maps, dict) or not all(isinstance(p, dict) for p in maps.values() if p):
            raise ValidationError(
                f"Неверная карта STP instance {inst!r}",
                field="stp_instances",
                value=maps,
            )
        result[_int_key(inst)] = {
            method: {_int_key(port): value for port, value in (ports or {}).items()}
            for method, ports in maps.items()
        }
    return result


@dataclass
class DiscoveredVlan:
    """
    VLAN из discovery.

    Attributes:
        vid: VLAN ID (как пришёл от коллектора, проверяется при синхронизации)
        name: Имя VLAN (None если коллектор не сообщил)
        stp_instance: Номер STP instance для этого VLAN
    """
    vid: Union[int, str]
    name: Optional[str] = None
    stp_instance: Optional[int] = None

    @classmethod
    def from_entry(cls, key: Any, data: Any) -> "DiscoveredVlan":
        """
        Создаёт из записи SNMP info: {vid: {vid, vname, stp_instance}}.

        Запись может быть просто VID (список [10, 20]).
        """
        data = _entry_dict(data, "vid", "vlans")
        stp_instance = data.get("stp_instance")
        return cls(
            vid=data.get("vid") or key,
            name=data.get("vname", data.get("name")),
            stp_instance=_int_key(stp_instance) if stp_instance is not None else None,
        )


@dataclass
class DiscoveredIP:
    """IP-адрес из discovery (mask — dotted quad или длина префикса)."""
    address: str
    mask: Optional[str] = None

    @classmethod
    def from_entry(cls, key: Any, data: Any) -> "DiscoveredIP":
        """
        Создаёт из записи SNMP info: {address: {address, mask}}.

        Запись может быть просто адресом (список ["10.0.0.1"]).
        """
        data = _entry_dict(data, "address", "ips")
        mask = data.get("mask")
        return cls(
            address=data.get("address") or (str(key) if key is not None else ""),
            mask=str(mask) if mask not in (None, "") else None,
        )


@dataclass
class DiscoveredInterface:
    """
    Снимок одного интерфейса из опроса устройства.

    Attributes:
        info: Скалярные поля (number, name, speed, oper_status, ...)
        physaddr: MAC-адрес (None/"" если устройство не сообщило)
        vlans: Список VLAN (None — секция отсутствует, не трогаем членство)
        ips: Список IP (None — секция отсутствует)
        stp_instances: {instance: {i_stp_bridge|i_stp_port|i_stp_state: {ifnumber: value}}}
    """
    info: Dict[str, Any] = field(default_factory=dict)
    physaddr: Optional[str] = None
    vlans: Optional[List[DiscoveredVlan]] = None
    ips: Optional[List[DiscoveredIP]] = None
    stp_instances: Optional[Dict[Any, Dict[str, Dict[Any, Any]]]] = None

    @property
    def number(self) -> Optional[Any]:
        return self.info.get("number")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiscoveredInterface":
        """
        Создаёт из словаря в формате SNMP info.

        vlans и ips могут быть словарями (ключ — vid/адрес) или списками.

        Raises:
            ValidationError: Секция vlans/ips/stp_instances неверного формата
        """
        info = {k: data[k] for k in INTERFACE_STD_FIELDS if k in data}

        vlans = None
        if "vlans" in data:
            raw = data.get("vlans") or {}
            if isinstance(raw, dict):
                vlans = [DiscoveredVlan.from_entry(k, v) for k, v in raw.items()]
            elif isinstance(raw, (list, tuple)):
                vlans = [DiscoveredVlan.from_entry(None, v) for v in raw]
            else:
                raise ValidationError("Секция vlans должна быть dict или list", field="vlans", value=raw)

        ips = None
        if "ips" in data:
            raw = data.get("ips") or {}
            if isinstance(raw, dict):
                ips = [DiscoveredIP.from_entry(k, v) for k, v in raw.items()]
            elif isinstance(raw, (list, tuple)):
                ips = [DiscoveredIP.from_entry(None, v) for v in raw]
            else:
                raise ValidationError("Секция ips должна быть dict или list", field="ips", value=raw)

        return cls(
            info=info,
            physaddr=data.get("physaddr"),
            vlans=vlans,
            ips=ips,
            stp_instances=normalize_stp_instances(data.get("stp_instances")),
        )

    @classmethod
    def ensure(cls, data: Union[Dict[str, Any], "DiscoveredInterface"]) -> "DiscoveredInterface":
        """
        Конвертирует Dict в DiscoveredInterface если нужно.

        Raises:
            ValidationError: Данные не dict и не DiscoveredInterface
        """
        if isinstance(data, cls):
            return data
        if isinstance(data, dict):
            return cls.from_dict(data)
        raise ValidationError("Неверные данные интерфейса", value=data)


# ==================== РЕЗУЛЬТАТЫ ====================

@dataclass
class SyncWarning:
    """
    Некритичная ошибка синхронизации (элемент пропущен, синхронизация продолжена).

    Attributes:
        item: Что пропущено ("physaddr 00:11:..", "subnet 10.0.0.0/30", ...)
        message: Причина
    """
    item: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class IPResolution:
    """Результат resolve_ip."""
    ipblock: Optional[Ipblock] = None
    subnet: Optional[Ipblock] = None
    ipv4_changed: bool = False
    ipv6_changed: bool = False
    warnings: List[SyncWarning] = field(default_factory=list)

    def mark_changed(self, version: int) -> None:
        """Отмечает изменение IPv4/IPv6 дерева."""
        if version == 4:
            self.ipv4_changed = True
        elif version == 6:
            self.ipv6_changed = True


@dataclass
class ReconcileResult:
    """
    Результат синхронизации одного интерфейса.

    Attributes:
        interface: Обновлённый интерфейс
        ipv4_changed: Добавлены IPv4 блоки (нужна перестройка дерева)
        ipv6_changed: Добавлены IPv6 блоки
        vlans_added: VID новых членств
        vlans_removed: VID удалённых членств
        ips: Синхронизированные IP хостов
        warnings: Некритичные ошибки
    """
    interface: Interface
    ipv4_changed: bool = False
    ipv6_changed: bool = False
    vlans_added: List[int] = field(default_factory=list)
    vlans_removed: List[int] = field(default_factory=list)
    ips: List[Ipblock] = field(default_factory=list)
    warnings: List[SyncWarning] = field(default_factory=list)

    def merge_ip(self, resolution: IPResolution) -> None:
        """Добавляет результат resolve_ip."""
        self.ipv4_changed = self.ipv4_changed or resolution.ipv4_changed
        self.ipv6_changed = self.ipv6_changed or resolution.ipv6_changed
        self.warnings.extend(resolution.warnings)
        if resolution.ipblock:
            self.ips.append(resolution.ipblock)


@dataclass
class BatchResult:
    """Результат синхронизации интерфейсов устройства."""
    created: int = 0
    updated: int = 0
    failed: int = 0
    ipv4_changed: bool = False
    ipv6_changed: bool = False
    results: List[ReconcileResult] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def warnings(self) -> List[SyncWarning]:
        return [w for r in self.results for w in r.warnings]

    def stats(self) -> Dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "failed": self.failed,
            "warnings": len(self.warnings),
        }
