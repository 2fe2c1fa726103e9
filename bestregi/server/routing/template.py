"""
Route templates.

A route template is a ``/``-separated pattern such as
``{controller=Home}/{action=Index}/{id?}``. Each segment is either a literal
or a single parameter:

- ``{name}``: required parameter
- ``{name=value}``: parameter with a default, may be omitted from the URL
- ``{name?}``: optional parameter, absent from the route values when omitted
- ``{*name}``: catch-all, swallows the rest of the path (always optional)

Literal matching is case-insensitive. Captured values are taken unchanged
from the already-decoded request path.
Omission is only possible from the right: once a segment is missing from the
URL every following segment must be omittable too.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional
from urllib.parse import quote

_PARAMETER = re.compile(r"^\{(?P<catch_all>\*)?(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<optional>\?)|=(?P<default>[^{}]*))?\}$")


class RouteTemplateError(ValueError):
    """Raised for a malformed route template."""


@dataclass(frozen=True)
class TemplateSegment:
    """One segment of a parsed route template."""

    literal: Optional[str] = None
    name: Optional[str] = None
    default: Optional[str] = None
    optional: bool = False
    catch_all: bool = False

    @property
    def is_parameter(self) -> bool:
        return self.name is not None

    @property
    def can_omit(self) -> bool:
        return self.optional or self.catch_all or self.default is not None


@dataclass(frozen=True)
class RouteTemplate:
    """Parsed route template with matching and URL generation."""

    text: str
    segments: tuple[TemplateSegment, ...]

    @classmethod
    def parse(cls, text: str) -> "RouteTemplate":
        """Parse ``text`` into a template.

        Raises:
            RouteTemplateError: on unbalanced braces, duplicate parameter
                names, or a catch-all that is not the last segment.
        """
        stripped = text.strip().strip("/")
        segments: List[TemplateSegment] = []
        seen: set[str] = set()
        parts = stripped.split("/") if stripped else []
        for index, part in enumerate(parts):
            if not part:
                raise RouteTemplateError(f"Empty segment in route template {text!r}")
            if "{" not in part and "}" not in part:
                segments.append(TemplateSegment(literal=part))
                continue
            found = _PARAMETER.match(part)
            if found is None:
                raise RouteTemplateError(f"Invalid segment {part!r} in route template {text!r}")
            name = found.group("name")
            if name.lower() in seen:
                raise RouteTemplateError(f"Parameter {name!r} appears more than once in {text!r}")
            seen.add(name.lower())
            catch_all = found.group("catch_all") is not None
            if catch_all and index != len(parts) - 1:
                raise RouteTemplateError(f"Catch-all parameter {name!r} must be the last segment of {text!r}")
            segments.append(
                TemplateSegment(
                    name=name,
                    default=found.group("default"),
                    optional=found.group("optional") is not None,
                    catch_all=catch_all,
                )
            )
        return cls(text=text, segments=tuple(segments))

    @property
    def parameter_names(self) -> List[str]:
        return [segment.name for segment in self.segments if segment.name is not None]

    @property
    def defaults(self) -> Dict[str, str]:
        return {s.name: s.default for s in self.segments if s.name is not None and s.default is not None}

    def match(self, path: str) -> Optional[Dict[str, str]]:
        """Match a request path, returning route values or ``None``.

        ``path`` is the already-decoded ASGI path; values are taken as is.
        Parameters omitted from the URL take their default; optional ones
        are left out of the result.
        """
        trimmed = path.strip("/")
        parts = trimmed.split("/") if trimmed else []
        values: Dict[str, str] = {}

        for index, segment in enumerate(self.segments):
            if segment.catch_all:
                rest = "/".join(parts[index:])
                if rest:
                    values[segment.name] = rest
                elif segment.default is not None:
                    values[segment.name] = segment.default
                return values

            if index >= len(parts):
                if not segment.can_omit:
                    return None
                if segment.default is not None:
                    values[segment.name] = segment.default
                continue

            part = parts[index]
            if not part:
                return None
            if segment.literal is not None:
                if part.lower() != segment.literal.lower():
                    return None
            else:
                values[segment.name] = part

        if len(parts) > len(self.segments):
            return None
        return values

    def build(self, values: Mapping[str, Optional[str]]) -> Optional[str]:
        """Generate the shortest URL path for ``values``.

        Trailing segments whose value equals their default (case-insensitive)
        or that are optional and absent are dropped. Returns ``None`` when a
        required parameter has no value.
        """
        lookup = {key.lower(): value for key, value in values.items() if value is not None and value != ""}
        rendered: List[Optional[str]] = []
        omittable: List[bool] = []

        for segment in self.segments:
            if segment.literal is not None:
                rendered.append(segment.literal)
                omittable.append(False)
                continue
            value = lookup.get(segment.name.lower())
            if value is None:
                if segment.default is not None:
                    rendered.append(segment.default)
                    omittable.append(True)
                elif segment.can_omit:
                    rendered.append(None)
                    omittable.append(True)
                else:
                    return None
                continue
            value = str(value)
            rendered.append(value if segment.catch_all else quote(value, safe=""))
            omittable.append(segment.default is not None and value.lower() == segment.default.lower())

        while rendered and omittable[-1]:
            rendered.pop()
            omittable.pop()

        if any(part is None for part in rendered):
            return None
        return "/" + "/".join(rendered)  # type: ignore[arg-type]

    def __str__(self) -> str:
        return self.text
