"""
Форматирование скорости интерфейса.

ifSpeed/ifHighSpeed (уже приведённые к bps) → человекочитаемая строка.
"""

from typing import Optional, Union

from ..constants import SPEED_MAP


def format_speed(speed: Optional[Union[int, float, str]]) -> str:
    """
    Конвертирует скорость в bps в читаемый вид.

    Сначала ищется точное совпадение в таблице legacy скоростей (T1, OC-3...),
    затем скорость масштабируется степенями 1000.

    Args:
        speed: Скорость в bps

    Returns:
        str: "T1", "100 Mbps", "1.0 Gbps" или "n/a"

    Examples:
        >>> format_speed(1544000)
        'T1'
        >>> format_speed(1000000000)
        '1.0 Gbps'
        >>> format_speed(100)
        '100 bps'
    """
    if speed is None or speed == "":
        return "n/a"
    try:
        speed = int(speed)
    except (TypeError, ValueError):
        return "n/a"

    if speed in SPEED_MAP:
        return SPEED_MAP[speed]

    if speed > 9999999999999:
        return "%d Tbps" % (speed / 1000000000000)
    if speed > 999999999999:
        return "%.1f Tbps" % (speed / 1000000000000.0)
    if speed > 9999999999:
        return "%d Gbps" % (speed / 1000000000)
    if speed > 999999999:
        return "%.1f Gbps" % (speed / 1000000000.0)
    if speed > 999999:
        return "%d Mbps" % (speed / 1000000)
    if speed > 9999:
        return "%d Kbps" % (speed / 1000)
    return "%d bps" % speed
