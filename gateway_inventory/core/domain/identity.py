"""
Нормализация идентичности устройств из снапшотов шлюзов.

Прошивки шлюзов присылают MAC с разными разделителями и регистром,
IP с пробелами, типы устройств синонимами. Все функции здесь
"мягкие": невалидное значение даёт None, исключений нет.
Одно плохое поле не должно блокировать остальной отчёт об устройстве.
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..constants import (
    ALLOWED_DEVICE_STATUSES,
    DEVICE_TYPE_SYNONYMS,
    REASON_MAC_INVALID,
    REASON_TYPE_INVALID,
)
from ..models import DeviceStatus, DeviceType

logger = logging.getLogger(__name__)

_NON_HEX = re.compile(r"[^0-9a-fA-F]")
_IP_SEGMENT = re.compile(r"[0-9]{1,3}")


def normalize_mac(value: Any) -> Optional[str]:
    """
    Приводит MAC к виду aa:bb:cc:dd:ee:ff.

    Убирает все не-hex символы; остаться должно ровно 12 hex-цифр.

    Args:
        value: MAC в любом формате (00-11-22-33-44-55, 0011.2233.4455, ...)

    Returns:
        str или None если длина не 12 hex-цифр

    Пример:
        normalize_mac("00-11-22-AA-BB-CC")  # "00:11:22:aa:bb:cc"
        normalize_mac("0011.2233")          # None
    """
    if not value or not isinstance(value, str):
        return None
    hex_digits = _NON_HEX.sub("", value).lower()
    if len(hex_digits) != 12:
        return None
    return ":".join(hex_digits[i:i + 2] for i in range(0, 12, 2))


def normalize_ip(value: Any) -> Optional[str]:
    """
    Проверяет IPv4 в dotted-quad.

    Ровно четыре сегмента по 1-3 ASCII-цифры в диапазоне 0-255.
    Возвращается обрезанная исходная строка (без переформатирования).

    Args:
        value: Строка IP

    Returns:
        str или None
    """
    if not value or not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    segments = trimmed.split(".")
    if len(segments) != 4:
        return None
    for segment in segments:
        if not _IP_SEGMENT.fullmatch(segment) or int(segment) > 255:
            return None
    return trimmed


def normalize_type(value: Any) -> Optional[DeviceType]:
    """
    Тип устройства по таблице синонимов (без учёта регистра).

    Неизвестный токен даёт None: запись отклоняется, а не получает
    неверный тип.

    Пример:
        normalize_type(" IPC ")   # DeviceType.CAMERA
        normalize_type("router")  # None
    """
    if not value or not isinstance(value, str):
        return None
    canonical = DEVICE_TYPE_SYNONYMS.get(value.strip().lower())
    return DeviceType(canonical) if canonical else None


def normalize_timestamp(value: Any) -> Optional[datetime]:
    """
    Разбирает ISO-8601 время сканирования.

    Поддерживает суффикс Z и смещение; время без зоны считается UTC.
    Неразборчивое значение логируется и трактуется как отсутствующее.

    Args:
        value: ISO строка

    Returns:
        datetime (aware, UTC) или None
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning(f"Некорректное время scannedAt: {value!r}")
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class FieldResult:
    """
    Результат проверки одного поля: значение или причина отказа.

    Attributes:
        value: Нормализованное значение (при успехе)
        error: Причина отказа (при ошибке)
    """
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def check_mac(raw: Any) -> FieldResult:
    """MAC записи снапшота: FieldResult(mac) или FieldResult(error="mac invalid")."""
    mac = normalize_mac(raw)
    if mac is None:
        return FieldResult(error=REASON_MAC_INVALID)
    return FieldResult(value=mac)


def check_type(raw: Any) -> FieldResult:
    """Тип записи снапшота: FieldResult(DeviceType) или FieldResult(error="type invalid")."""
    device_type = normalize_type(raw)
    if device_type is None:
        return FieldResult(error=REASON_TYPE_INVALID)
    return FieldResult(value=device_type)


def clean_text(value: Any) -> Optional[str]:
    """Обрезает пробелы; пустая строка превращается в None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def extract_statuses(statuses: Any) -> Tuple[DeviceStatus, List[str]]:
    """
    Разбирает список статусов шлюза.

    Первый непустой статус становится основным (если он из
    online/offline/warning/unknown, иначе unknown), остальные
    в lower-case уходят в extraStatuses.

    Args:
        statuses: Список строк из снапшота

    Returns:
        (основной статус, дополнительные статусы)

    Пример:
        extract_statuses(["Online", "Signal-Weak"])
        # (DeviceStatus.ONLINE, ["signal-weak"])
    """
    if not isinstance(statuses, list):
        return DeviceStatus.UNKNOWN, []

    cleaned = [s.strip() for s in statuses if isinstance(s, str) and s.strip()]
    if not cleaned:
        return DeviceStatus.UNKNOWN, []

    primary = cleaned[0].lower()
    status = DeviceStatus(primary) if primary in ALLOWED_DEVICE_STATUSES else DeviceStatus.UNKNOWN
    return status, [s.lower() for s in cleaned[1:]]


def _is_finite_number(value: Any) -> bool:
    # bool является подклассом int, но не метрика
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def extract_metrics(
    latency_ms: Any = None,
    packet_loss: Any = None,
    metrics: Any = None,
) -> Optional[Dict[str, float]]:
    """
    Собирает числовые метрики связи.

    latencyMs и packetLoss плюс поля объекта metrics; всё,
    что не является конечным числом, молча отбрасывается.

    Returns:
        dict или None если метрик нет
    """
    result: Dict[str, float] = {}
    if _is_finite_number(latency_ms):
        result["latencyMs"] = latency_ms
    if _is_finite_number(packet_loss):
        result["packetLoss"] = packet_loss
    if isinstance(metrics, dict):
        for key, value in metrics.items():
            if _is_finite_number(value):
                result[str(key)] = value
    return result or None
