from __future__ import annotations

"""
Application descriptor model.

WHY THIS FILE EXISTS:
The `{application, Name, Props}` term is a loose property list. This model
exposes the fields this tool reasons about (name, vsn, modules) as typed
attributes and carries every other property through untouched, in its
original order, so a rewritten descriptor keeps the author's layout.
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from otpbundle.core.descriptor.terms import Atom

__all__ = ["AppDescriptor"]


APPLICATION_TAG = "application"
KNOWN_KEYS = ("vsn", "modules")


class AppDescriptor(BaseModel):
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    version: Optional[str] = None
    # None: no declaration at all (key absent or `undefined`). [] is a valid, empty set.
    modules: Optional[List[str]] = None
    extra: Dict[str, Any] = Field(default_factory=dict)
    key_order: List[str] = Field(default_factory=list)

    @field_validator("modules")
    @classmethod
    def _norm_modules(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        return [str(m) for m in v]

    # ---- identity ----
    @property
    def app_id(self) -> str:
        return f"{self.name}-{self.version}"

    # ---- conversions ----
    @classmethod
    def from_term(cls, term: Any) -> "AppDescriptor":
        """
        Build from a consulted `{application, Name, [Props]}` term.
        Raises ValueError when the term does not have that shape.
        """
        if not (isinstance(term, tuple) and len(term) == 3):
            raise ValueError("expected {application, Name, Properties}")
        tag, name, props = term
        if not (isinstance(tag, Atom) and tag == APPLICATION_TAG):
            raise ValueError(f"expected 'application' tag, got {tag!r}")
        if not isinstance(name, Atom):
            raise ValueError(f"application name must be an atom, got {name!r}")
        if not isinstance(props, list):
            raise ValueError("application properties must be a list")

        version: Optional[str] = None
        modules: Optional[List[str]] = None
        extra: Dict[str, Any] = {}
        order: List[str] = []
        for prop in props:
            if not (isinstance(prop, tuple) and len(prop) == 2 and isinstance(prop[0], Atom)):
                raise ValueError(f"application properties must be {{Key, Value}} tuples, got {prop!r}")
            key, value = str(prop[0]), prop[1]
            if key in order:
                raise ValueError(f"duplicate property {key!r}")
            order.append(key)
            if key == "vsn":
                if not isinstance(value, str):
                    raise ValueError(f"vsn must be a string, got {value!r}")
                version = str(value)
            elif key == "modules":
                modules = _modules_from_term(value)
            else:
                extra[key] = value

        return cls(name=str(name), version=version, modules=modules, extra=extra, key_order=order)

    def to_term(self) -> tuple:
        props: List[tuple] = []
        emitted = set()
        for key in self.key_order:
            emitted.add(key)
            if key == "vsn":
                if self.version is not None:
                    props.append((Atom("vsn"), str(self.version)))
            elif key == "modules":
                props.append((Atom("modules"), _modules_to_term(self.modules)))
            elif key in self.extra:
                props.append((Atom(key), self.extra[key]))
        if "vsn" not in emitted and self.version is not None:
            props.append((Atom("vsn"), str(self.version)))
        if "modules" not in emitted and self.modules is not None:
            props.append((Atom("modules"), _modules_to_term(self.modules)))
        for key, value in self.extra.items():
            if key not in emitted:
                props.append((Atom(key), value))
        return (Atom(APPLICATION_TAG), Atom(self.name), props)

    def with_modules(self, modules: Iterable[str]) -> "AppDescriptor":
        """Copy with `modules` replaced in place (or appended) by the sorted set."""
        order = list(self.key_order)
        if "modules" not in order:
            order.append("modules")
        return self.model_copy(update={"modules": sorted({str(m) for m in modules}), "key_order": order})


def _modules_from_term(value: Any) -> Optional[List[str]]:
    if isinstance(value, Atom) and value == "undefined":
        return None
    if not isinstance(value, list):
        raise ValueError(f"modules must be a list of atoms, got {value!r}")
    for m in value:
        if not isinstance(m, Atom):
            raise ValueError(f"module names must be atoms, got {m!r}")
    return [str(m) for m in value]


def _modules_to_term(modules: Optional[List[str]]) -> Any:
    if modules is None:
        return Atom("undefined")
    return [Atom(m) for m in modules]
