"""YAML document stream adapters.

The CI server submits one text blob that may hold several ``---`` separated
documents. Parsing is all-or-nothing: the whole stream is loaded before any
document is transformed so a syntax error late in the stream never yields
partial output.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import yaml

from ..utils.errors import ParseError

DOCUMENT_SEPARATOR = "---\n"
DOCUMENT_END = "...\n"
LINE_WIDTH = 500


class _NoAliasDumper(yaml.SafeDumper):
    """Safe dumper that writes every node literally instead of using anchors."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def parse_documents(text: str) -> list[Any]:
    """Parse ``text`` into a list of plain Python documents.

    Raises:
        ParseError: When any document in the stream is malformed.
    """
    try:
        return list(yaml.safe_load_all(text))
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark
        raise ParseError(
            "Configuration is not valid YAML",
            line=mark.line + 1 if mark is not None else None,
            column=mark.column + 1 if mark is not None else None,
            detail=str(exc),
        ) from exc
    except yaml.YAMLError as exc:
        raise ParseError("Configuration is not valid YAML", detail=str(exc)) from exc
    except RecursionError as exc:
        raise ParseError(
            "Configuration is not valid YAML",
            detail="Nesting is too deep to parse",
        ) from exc


def dump_document(document: Any) -> str:
    """Serialise one document without the ``...`` end marker PyYAML adds to scalars."""
    text = yaml.dump(
        document,
        Dumper=_NoAliasDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=LINE_WIDTH,
    )
    if text.endswith(DOCUMENT_END):
        return text[: -len(DOCUMENT_END)]
    return text


def dump_documents(documents: Iterable[Any]) -> str:
    """Serialise ``documents`` into one stream with a leading ``---`` marker."""
    return DOCUMENT_SEPARATOR + f"\n{DOCUMENT_SEPARATOR}".join(
        dump_document(document) for document in documents
    )


__all__ = ["DOCUMENT_END", "DOCUMENT_SEPARATOR", "LINE_WIDTH", "dump_document", "dump_documents", "parse_documents"]
