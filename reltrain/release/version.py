"""Version descriptor and the version file that carries it.

The version file is an XML document with a single entry:

    <root>
      <versions>
        <version name="Shell" value="1.4.7.3" />
      </versions>
    </root>

The last two numeric components are build and revision. A reset bumps build
and zeroes revision; it is the only mutation the train ever applies.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from reltrain.core.result import Err, Ok, Result

_VERSION_RE = re.compile(r"^\d+(?:\.\d+)+$")


@dataclass(frozen=True, slots=True, order=True)
class VersionDescriptor:
    components: tuple[int, ...]

    @property
    def build(self) -> int:
        return self.components[-2]

    @property
    def revision(self) -> int:
        return self.components[-1]

    @property
    def is_reset(self) -> bool:
        return self.revision == 0

    def reset(self) -> VersionDescriptor:
        return VersionDescriptor((*self.components[:-2], self.build + 1, 0))

    def __str__(self) -> str:
        return ".".join(str(c) for c in self.components)


def parse_version(value: str) -> VersionDescriptor | None:
    """Parse a dotted numeric string with at least two components."""
    text = value.strip()
    if _VERSION_RE.match(text) is None:
        return None
    return VersionDescriptor(tuple(int(part) for part in text.split(".")))


@dataclass(frozen=True, slots=True)
class VersionDocument:
    """A parsed version file, kept with its original text for rewriting."""

    text: str
    name: str | None
    raw_value: str
    version: VersionDescriptor

    def render(self, version: VersionDescriptor) -> Result[str, str]:
        """Return the file text with only the version value replaced."""
        pattern = re.compile(
            r"(<version\b[^>]*?\bvalue\s*=\s*)([\"'])" + re.escape(self.raw_value) + r"\2"
        )
        out, n = pattern.subn(lambda m: f"{m.group(1)}{m.group(2)}{version}{m.group(2)}", self.text)
        if n != 1:
            return Err(f"expected one version value to rewrite, found {n}")
        return Ok(out)


def parse_version_document(text: str) -> Result[VersionDocument, str]:
    """Parse a version file. Exactly one version entry is required."""
    try:
        root = ET.fromstring(text.lstrip("\ufeff"))
    except ET.ParseError as e:
        return Err(f"invalid XML: {e}")

    entries = root.findall("./versions/version")
    if len(entries) != 1:
        return Err(f"expected exactly one version entry, found {len(entries)}")

    entry = entries[0]
    raw = entry.get("value")
    if raw is None:
        return Err("version entry has no value attribute")

    version = parse_version(raw)
    if version is None:
        return Err(f"invalid version value: {raw!r}")

    return Ok(VersionDocument(text=text, name=entry.get("name"), raw_value=raw, version=version))
