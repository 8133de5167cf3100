"""Presentation tree produced by the renderer.

A :class:`RenderNode` is a plain element description (tag, attributes, text,
children). It carries no behaviour: HTML, Markdown or any other target is a
separate pass over the tree.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RenderNode(BaseModel):
    """One element of the presentation tree.

    ``key`` is the id of the block the node was rendered from (top-level block
    nodes only) so consumers can diff trees by block.
    """

    model_config = ConfigDict(frozen=True)

    tag: str = Field(..., min_length=1)
    attrs: dict[str, str] = Field(default_factory=dict)
    text: str = ""
    children: tuple[RenderNode, ...] = ()
    key: str | None = None

    def walk(self) -> list[RenderNode]:
        """Return this node and all descendants, depth first."""
        out = [self]
        for child in self.children:
            out.extend(child.walk())
        return out

    def text_content(self) -> str:
        """Concatenated text of this node and its descendants."""
        return self.text + "".join(child.text_content() for child in self.children)


RenderNode.model_rebuild()


def node(
    tag: str,
    *children: RenderNode,
    text: str = "",
    key: str | None = None,
    **attrs: str,
) -> RenderNode:
    """Shorthand constructor; ``class_`` is accepted for the ``class`` attribute."""
    if "class_" in attrs:
        attrs["class"] = attrs.pop("class_")
    return RenderNode(tag=tag, attrs=attrs, text=text, children=children, key=key)


__all__ = ["RenderNode", "node"]
