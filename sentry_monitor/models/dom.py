"""
Framework-agnostic element tree and the operations that update it
"""

from collections.abc import Iterator
from typing import Literal

from pydantic import BaseModel


class Element(BaseModel):
    """A node of the widget; only keyed nodes can be patched in place"""

    tag: str = "div"
    key: str | None = None
    class_name: str = ""
    text: str = ""
    attrs: dict[str, str] = {}
    children: list["Element"] = []

    def walk(self) -> Iterator["Element"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def index(self) -> dict[str, "Element"]:
        return {el.key: el for el in self.walk() if el.key}

    def keys(self) -> list[str]:
        return [el.key for el in self.walk() if el.key]

    def has_class(self, name: str) -> bool:
        return name in self.class_name.split()

    def to_text(self) -> str:
        """Visible text, one line per element, for logs and quick checks"""
        lines = []
        self._collect_text(lines)
        return "\n".join(lines)

    def _collect_text(self, lines: list[str]):
        if self.has_class("hidden"):
            return
        if self.text:
            lines.append(self.text)
        for child in self.children:
            child._collect_text(lines)


class ReplaceContent(BaseModel):
    op: Literal["replace"] = "replace"
    root: Element


class SetText(BaseModel):
    op: Literal["set_text"] = "set_text"
    key: str
    text: str


class SetAttribute(BaseModel):
    """Set an attribute; name 'class' targets the element's class list"""

    op: Literal["set_attribute"] = "set_attribute"
    key: str
    name: str
    value: str


DomOperation = ReplaceContent | SetText | SetAttribute
