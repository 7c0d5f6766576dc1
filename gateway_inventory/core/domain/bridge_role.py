"""
Определение роли беспроводного моста: AP (точка доступа) или ST (станция).

Прошивки сообщают роль по-разному: явным полем, режимом, в модели,
в имени или среди статусов. Кандидаты проверяются в порядке доверия,
первый распознанный побеждает.

Один и тот же матчер используется при приёме снапшотов
(resolve_bridge_role) и при отрисовке дерева (resolve_display_bridge_role).

Пример:
    candidates = collect_bridge_role_candidates(bridge_role="ST", name="AP-Master")
    resolve_bridge_role(candidates)  # BridgeRole.ST (явное поле важнее имени)
"""

import re
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional

from ..constants import AP_TOKENS, DISPLAY_ROLE_KEYS, ST_TOKENS

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")
_AP_STANDALONE = re.compile(r"(^|[^a-z])ap($|[^a-z])")


class BridgeRole(str, Enum):
    """Роль моста. UNKNOWN используется только визуализацией."""
    AP = "AP"
    ST = "ST"
    UNKNOWN = "UNKNOWN"


def match_bridge_role(candidate: Any) -> Optional[BridgeRole]:
    """
    Распознаёт роль в одной строке-кандидате.

    Сначала токены (разбиение по не-алфавитно-цифровым символам),
    AP проверяется раньше ST. Если токены не помогли, подстроки:
    "ap" между не-буквами, "apmode", "ap-" для AP;
    "station", " sta", "sta-", "client", "subscriber" для ST.

    Args:
        candidate: Строка (или значение, приводимое к строке)

    Returns:
        BridgeRole.AP, BridgeRole.ST или None
    """
    if candidate is None:
        return None
    normalized = str(candidate).strip().lower()
    if not normalized:
        return None

    tokens = {t for t in _TOKEN_SPLIT.split(normalized) if t}
    if tokens & AP_TOKENS:
        return BridgeRole.AP
    if tokens & ST_TOKENS:
        return BridgeRole.ST

    if _AP_STANDALONE.search(normalized) or "apmode" in normalized or "ap-" in normalized:
        return BridgeRole.AP
    if any(marker in normalized for marker in ("station", " sta", "sta-", "client", "subscriber")):
        return BridgeRole.ST
    return None


def resolve_bridge_role(candidates: Iterable[Any]) -> Optional[BridgeRole]:
    """
    Первый распознанный кандидат определяет роль.

    None означает "роль пока неизвестна", это не ошибка.
    """
    for candidate in candidates:
        role = match_bridge_role(candidate)
        if role:
            return role
    return None


def collect_bridge_role_candidates(
    bridge_role: Any = None,
    mode: Any = None,
    role: Any = None,
    model: Any = None,
    name: Any = None,
    statuses: Optional[Iterable[Any]] = None,
) -> List[str]:
    """
    Упорядоченный список кандидатов для записи снапшота.

    Порядок: bridgeRole, mode, role, model, name, затем каждый статус.
    Пустые значения пропускаются.
    """
    candidates: List[str] = []

    def push(value: Any) -> None:
        if value is None:
            return
        text = str(value).strip()
        if text:
            candidates.append(text)

    for value in (bridge_role, mode, role, model, name):
        push(value)
    if isinstance(statuses, (list, tuple)):
        for status in statuses:
            push(status)
    return candidates


def resolve_display_bridge_role(
    metadata: Optional[Mapping[str, Any]] = None,
    name: Optional[str] = None,
) -> BridgeRole:
    """
    Роль моста для визуализации.

    Кандидаты: ключи metadata (bridgeRole, role, bridge_mode, bridgeMode,
    mode, type, category, kind, model), флаги isAp / isStation, имя элемента.

    Returns:
        BridgeRole (UNKNOWN если ничего не распознано)
    """
    candidates: List[Any] = []
    if isinstance(metadata, Mapping):
        for key in DISPLAY_ROLE_KEYS:
            value = metadata.get(key)
            if isinstance(value, (str, int, float)) and not isinstance(value, bool):
                candidates.append(value)
        if "isAp" in metadata:
            candidates.append("ap" if metadata.get("isAp") else "st")
        if "isStation" in metadata:
            candidates.append("st" if metadata.get("isStation") else "ap")
    if name:
        candidates.append(name)

    return resolve_bridge_role(candidates) or BridgeRole.UNKNOWN
