from __future__ import annotations

from typing import Any

from .errors import InvalidArgument


def require_payload(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise InvalidArgument("请求数据格式错误")
    return data


def require_fields(data: dict[str, Any], *names: str, message: str | None = None) -> list[Any]:
    """Return the named values in order; any missing or blank one is InvalidArgument."""
    missing = [name for name in names if _is_blank(data.get(name))]
    if missing:
        raise InvalidArgument(message or f"缺少必填参数: {', '.join(missing)}")
    return [data[name] for name in names]


def require_str(data: dict[str, Any], name: str, message: str | None = None) -> str:
    value = data.get(name)
    if _is_blank(value):
        raise InvalidArgument(message or f"缺少必填参数: {name}")
    if not isinstance(value, str):
        raise InvalidArgument(f"{name} 必须是字符串")
    return value.strip()


def optional_str(data: dict[str, Any], name: str, max_length: int = 500) -> str | None:
    value = data.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgument(f"{name} 必须是字符串")
    value = value.strip()
    if len(value) > max_length:
        raise InvalidArgument(f"{name} 不能超过 {max_length} 个字符")
    return value or None


def require_bool(data: dict[str, Any], name: str, message: str | None = None) -> bool:
    value = data.get(name)
    # bool only; 0/1 and "true" are rejected
    if not isinstance(value, bool):
        raise InvalidArgument(message or f"{name} 必须是布尔值")
    return value


def require_event_scope(data: dict[str, Any]) -> tuple[str, str]:
    org_id, event_id = require_fields(
        data, "organizationId", "eventId", message="缺少组织或活动ID",
    )
    if not isinstance(org_id, str) or not isinstance(event_id, str):
        raise InvalidArgument("组织或活动ID格式错误")
    return org_id, event_id


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
