"""
Tests for VLAN domain logic.
"""

import pytest

from netinventory.core.domain import parse_vid, vid_from_interface_name
from netinventory.core.exceptions import ValidationError


@pytest.mark.unit
class TestParseVid:
    """Тесты разбора VID."""

    @pytest.mark.parametrize("value, expected", [
        (1, 1),
        ("100", 100),
        (" 20 ", 20),
        (4094, 4094),
    ])
    def test_valid(self, value, expected):
        assert parse_vid(value) == expected

    @pytest.mark.parametrize("value", [0, 4095, "abc", None, ""])
    def test_invalid(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_vid(value)
        assert exc_info.value.field == "vid"


@pytest.mark.unit
class TestVidFromInterfaceName:
    """Тесты VID из имени SVI."""

    @pytest.mark.parametrize("name, expected", [
        ("Vlan100", 100),
        ("Vlan1", 1),
        ("GigabitEthernet0/1", None),
        ("Vlan-interface100", None),
        ("", None),
        (None, None),
    ])
    def test_names(self, name, expected):
        assert vid_from_interface_name(name) == expected
