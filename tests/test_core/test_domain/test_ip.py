"""
Tests for IP domain logic.

Проверяет:
- Разбор и нормализацию адресов
- Конвертацию маски в префикс
- Вычисление подсети и правило создания подсети (/31)
"""

import pytest

from netinventory.core.domain.ip import (
    get_ip_version,
    get_subnet_addr,
    host_prefix,
    is_loopback,
    mask_to_prefix,
    needs_subnet,
    normalize_address,
    parse_address,
)
from netinventory.core.exceptions import ValidationError


@pytest.mark.unit
class TestParseAddress:
    """Тесты разбора адреса."""

    def test_ipv4(self):
        assert get_ip_version("10.0.0.1") == 4
        assert host_prefix(4) == 32

    def test_ipv6(self):
        assert get_ip_version("2001:db8::1") == 6
        assert host_prefix(6) == 128

    def test_normalize_ipv6(self):
        """IPv6 приводится к сжатой форме."""
        assert normalize_address("2001:0db8:0000:0000::0001") == "2001:db8::1"

    @pytest.mark.parametrize("address", ["", None, "999.1.1.1", "not-an-ip"])
    def test_invalid(self, address):
        with pytest.raises(ValidationError) as exc_info:
            parse_address(address)
        assert exc_info.value.field == "address"

    @pytest.mark.parametrize("address, expected", [
        ("127.0.0.1", True),
        ("127.10.0.1", True),
        ("::1", True),
        ("10.0.0.1", False),
        ("2001:db8::1", False),
    ])
    def test_is_loopback(self, address, expected):
        assert is_loopback(address) is expected


@pytest.mark.unit
class TestMaskToPrefix:
    """Тесты конвертации маски."""

    @pytest.mark.parametrize("mask, expected", [
        ("255.255.255.252", 30),
        ("255.255.255.0", 24),
        ("255.255.255.255", 32),
        ("24", 24),
        ("/31", 31),
        (16, 16),
    ])
    def test_ipv4(self, mask, expected):
        assert mask_to_prefix(mask) == expected

    def test_ipv6_prefix_length(self):
        assert mask_to_prefix("64", version=6) == 64
        assert mask_to_prefix("/128", version=6) == 128

    @pytest.mark.parametrize("mask, version", [
        ("33", 4),
        ("255.0.255.0", 4),
        ("garbage", 4),
        ("ffff:ffff::", 6),
        ("129", 6),
    ])
    def test_invalid(self, mask, version):
        with pytest.raises(ValidationError):
            mask_to_prefix(mask, version=version)


@pytest.mark.unit
class TestSubnet:
    """Тесты вычисления подсети."""

    def test_get_subnet_addr(self):
        assert get_subnet_addr("10.0.0.5", "255.255.255.252") == ("10.0.0.4", 30)

    def test_get_subnet_addr_ipv6(self):
        assert get_subnet_addr("2001:db8::1", "64") == ("2001:db8::", 64)

    def test_needs_subnet_regular(self):
        assert needs_subnet("10.0.0.5", "10.0.0.4", 30) is True

    def test_needs_subnet_same_address(self):
        """Адрес сети совпадает с адресом хоста — подсеть не нужна."""
        assert needs_subnet("10.0.0.4", "10.0.0.4", 30) is False
        assert needs_subnet("10.0.0.1", "10.0.0.1", 32) is False

    def test_needs_subnet_point_to_point(self):
        """IPv4 /31 записывается всегда."""
        assert needs_subnet("10.0.0.0", "10.0.0.0", 31) is True
        assert needs_subnet("10.0.0.1", "10.0.0.0", 31) is True
