"""
Parser for JSON-mode model output.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, List, Optional

from .exceptions import ParsingError


@dataclass
class ParseResult:
    """Result of cleaning a structured response."""

    data: Any
    cleaned: str
    raw_text: str


class StructuredOutputParser:
    """
    Robustly extract a JSON document from model output.

    Models asked for JSON frequently wrap it in markdown fences or add a
    sentence of prose around it. The parser tries, in order: the whole
    text, fenced code blocks, then every balanced ``{...}`` / ``[...]``
    substring.
    """

    def __init__(self, max_payload_chars: int = 2_000_000):
        self.max_payload_chars = max_payload_chars

    def parse(self, text: str) -> ParseResult:
        """
        Parse ``text`` into JSON and return the compact re-serialised form.

        Raises:
            ParsingError: If no candidate parses as JSON.
        """
        if not text or not text.strip():
            raise ParsingError("Expected JSON output but the model returned an empty response")

        for candidate in self._extract_candidate_blocks(text):
            if self.max_payload_chars and len(candidate) > self.max_payload_chars:
                continue
            data = self._load_json(candidate)
            if data is None:
                continue
            return ParseResult(data=data, cleaned=json.dumps(data), raw_text=text)

        preview = text.strip()[:200]
        raise ParsingError(f"Failed to parse JSON response: {preview}", raw_text=text)

    def _extract_candidate_blocks(self, text: str) -> List[str]:
        """Pull out all substrings that might contain the JSON payload."""
        blocks: List[str] = [text.strip()]

        fenced_blocks = re.findall(r"```(?:json|JSON)?\s*(.*?)```", text, re.DOTALL)
        blocks.extend(block.strip() for block in fenced_blocks)

        blocks.extend(self._find_balanced(text, "{", "}"))
        blocks.extend(self._find_balanced(text, "[", "]"))

        # Deduplicate while preserving order
        deduped = []
        seen = set()
        for block in blocks:
            if not block or block in seen:
                continue
            deduped.append(block)
            seen.add(block)
        return deduped

    def _load_json(self, candidate: str) -> Optional[Any]:
        """Attempt JSON parsing; only objects and arrays count as structured output."""
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            return None
        if isinstance(data, (dict, list)):
            return data
        return None

    def _find_balanced(self, text: str, opener: str, closer: str) -> List[str]:
        """Collect balanced substrings delimited by opener/closer, outermost first."""
        candidates: List[str] = []
        idx = 0
        while idx < len(text):
            start = text.find(opener, idx)
            if start == -1:
                break
            depth = 0
            end = -1
            in_string = False
            escaped = False
            for pos in range(start, len(text)):
                char = text[pos]
                if in_string:
                    if escaped:
                        escaped = False
                    elif char == "\\":
                        escaped = True
                    elif char == '"':
                        in_string = False
                    continue
                if char == '"':
                    in_string = True
                elif char == opener:
                    depth += 1
                elif char == closer:
                    depth -= 1
                    if depth == 0:
                        end = pos
                        break
            if end == -1:
                idx = start + 1
                continue
            candidates.append(text[start : end + 1])
            idx = end + 1
        return candidates


__all__ = ["StructuredOutputParser", "ParseResult"]
