"""Validation and self-documentation for linkshelf configuration files."""

from __future__ import annotations

from pathlib import Path
from types import NoneType, UnionType
from typing import Any, Iterator, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from .app import AppConfig
from .base import load_config

_LOCAL_HOSTS = frozenset({"127.0.0.1", "localhost", "::1"})


class ConfigInspectionError(RuntimeError):
    """Raised when configuration inspection fails unexpectedly."""


def _error_result(path: Path, error_type: str, message: str, **extra: Any) -> dict[str, Any]:
    error: dict[str, Any] = {"type": error_type, "message": message, **extra}
    return {"status": "error", "config_path": str(path), "error": error}


def check_config(
    path: Path, *, config_cls: type[AppConfig] = AppConfig
) -> tuple[dict[str, Any], int, AppConfig | None]:
    """Load ``path`` and report problems without raising.

    Returns ``(result, exit_code, config)``. Exit codes: ``0`` valid,
    ``1`` unreadable TOML, ``2`` missing or inaccessible file, ``3`` schema
    violations. ``config`` is ``None`` unless validation succeeded.
    """

    try:
        config = load_config(config_cls, path)
    except FileNotFoundError as exc:
        return _error_result(path, "missing_file", str(exc)), 2, None
    except PermissionError as exc:
        return _error_result(path, "permission_error", str(exc)), 2, None
    except ValidationError as exc:
        details = [
            {
                "loc": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        result = _error_result(path, "validation_error", "Configuration validation failed", details=details)
        return result, 3, None
    except ValueError as exc:
        return _error_result(path, "invalid_format", str(exc)), 1, None
    except Exception as exc:  # pragma: no cover - unexpected failures
        raise ConfigInspectionError("Unexpected configuration inspection error") from exc

    result = {"status": "ok", "config_path": str(path), "warnings": _collect_warnings(config)}
    return result, 0, config


def explain_config(*, config_cls: type[AppConfig] = AppConfig) -> list[dict[str, Any]]:
    """List every field of ``config_cls``, nested sections flattened with dotted names."""

    return list(_describe_model(config_cls, prefix="", seen=set()))


def _describe_model(model_cls: type[BaseModel], *, prefix: str, seen: set[type[BaseModel]]) -> Iterator[dict[str, Any]]:
    if model_cls in seen:
        return
    seen.add(model_cls)

    for name, field in model_cls.model_fields.items():
        dotted = f"{prefix}{name}"
        yield {
            "name": dotted,
            "type": _type_name(field.annotation),
            "required": field.is_required(),
            "default": _default_of(field),
            "description": field.description or "",
        }
        section = _section_model(field.annotation)
        if section is not None:
            yield from _describe_model(section, prefix=f"{dotted}.", seen=seen)


def _collect_warnings(config: AppConfig) -> list[str]:
    warnings: list[str] = []

    if config.github is not None and not config.github.username:
        warnings.append("'github' section has no username; 'import github' will require --user")
    if config.vercel is not None and not config.vercel.token:
        warnings.append("'vercel' section has no token; 'import vercel' will require --token")
    if config.web and config.web.auth is None and config.web.host not in _LOCAL_HOSTS:
        warnings.append(f"API server binds to {config.web.host} without authentication")

    return warnings


def _union_members(annotation: Any) -> tuple[Any, ...] | None:
    if get_origin(annotation) in (Union, UnionType):
        return get_args(annotation)
    return None


def _type_name(annotation: Any) -> str:
    members = _union_members(annotation)
    if members is not None:
        present = [member for member in members if member is not NoneType]
        if len(present) == 1 and len(members) == 2:
            return f"Optional[{_type_name(present[0])}]"
        return "Union[" + ", ".join(_type_name(member) for member in members) + "]"

    origin = get_origin(annotation)
    if origin is not None:
        inner = ", ".join(_type_name(arg) for arg in get_args(annotation))
        base = getattr(origin, "__name__", str(origin))
        return f"{base}[{inner}]" if inner else base
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


def _section_model(annotation: Any) -> type[BaseModel] | None:
    candidates = _union_members(annotation) or (annotation,)
    for candidate in candidates:
        if isinstance(candidate, type) and issubclass(candidate, BaseModel):
            return candidate
    return None


def _default_of(field: FieldInfo) -> Any:
    if field.default_factory is not None:
        return _jsonable(field.default_factory())
    if field.is_required():
        return None
    return _jsonable(field.default)


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


__all__ = ["ConfigInspectionError", "check_config", "explain_config"]
