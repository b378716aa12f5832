"""AST serialization and deserialization for APEX documents.

Provides round-trip serialization of ``ApexDocument`` trees to and from
JSON and YAML.  The serialized form is a plain dict/list structure that
maps naturally to both formats.

Usage
-----
::

    from apex_spec.ast.serializer import AstSerializer

    serializer = AstSerializer()
    json_text = serializer.to_json(document)
    assert serializer.from_json(json_text) == document
"""
from __future__ import annotations

import json

import yaml

from apex_spec.ast.nodes import ApexDocument, Block, Span
from apex_spec.grammar.tokens import BlockKind


class AstSerializer:
    """Converts between ``ApexDocument`` objects and plain Python dicts.

    Every node dict carries a ``"kind"`` discriminator; block dicts use
    the block identifier (``"TASK"``, ``"PLAN"`` ...) as ``block``.
    """

    # ------------------------------------------------------------------
    # Serialization (AST -> dict)
    # ------------------------------------------------------------------

    def to_dict(self, document: ApexDocument) -> dict[str, object]:
        """Serialize an ``ApexDocument`` to a JSON-compatible dict."""
        return {
            "kind": "ApexDocument",
            "blocks": [self._block_to_dict(b) for b in document.blocks],
        }

    def _span_to_dict(self, span: Span) -> dict[str, int]:
        return {"start_line": span.start_line, "end_line": span.end_line}

    def _block_to_dict(self, block: Block) -> dict[str, object]:
        return {
            "kind": "Block",
            "block": block.kind.value,
            "lines": list(block.lines),
            "span": self._span_to_dict(block.span),
        }

    # ------------------------------------------------------------------
    # Deserialization (dict -> AST)
    # ------------------------------------------------------------------

    def from_dict(self, data: dict[str, object]) -> ApexDocument:
        """Deserialize an ``ApexDocument`` from a dict produced by ``to_dict``.

        Raises
        ------
        ValueError
            If the dict does not describe an ``ApexDocument``.
        """
        if data.get("kind") != "ApexDocument":
            raise ValueError(f"Expected kind 'ApexDocument', got {data.get('kind')!r}")
        return ApexDocument(
            blocks=tuple(self._block_from_dict(b) for b in data.get("blocks", [])),
        )

    def _span_from_dict(self, d: dict[str, int]) -> Span:
        return Span(start_line=int(d["start_line"]), end_line=int(d["end_line"]))

    def _block_from_dict(self, d: dict[str, object]) -> Block:
        name = d["block"]
        kind = BlockKind.lookup(str(name))
        if kind is None:
            raise ValueError(f"Unknown block kind: {name!r}")
        return Block(
            kind=kind,
            lines=tuple(str(line) for line in d.get("lines", [])),
            span=self._span_from_dict(d["span"]),
        )

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, document: ApexDocument, indent: int = 2) -> str:
        """Serialize an ``ApexDocument`` to a JSON string."""
        return json.dumps(self.to_dict(document), indent=indent, ensure_ascii=False)

    def from_json(self, text: str) -> ApexDocument:
        """Deserialize an ``ApexDocument`` from a JSON string."""
        data: dict[str, object] = json.loads(text)
        return self.from_dict(data)

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, document: ApexDocument) -> str:
        """Serialize an ``ApexDocument`` to a YAML string."""
        return yaml.dump(
            self.to_dict(document), default_flow_style=False, allow_unicode=True, sort_keys=False
        )

    def from_yaml(self, text: str) -> ApexDocument:
        """Deserialize an ``ApexDocument`` from a YAML string."""
        data: dict[str, object] = yaml.safe_load(text)
        return self.from_dict(data)
