"""Whitespace normalisation for rendered Go sources."""

from __future__ import annotations

from typing import List


class GoSourceFormatter:
    """Cleans template output: line endings, trailing blanks, blank runs."""

    def format(self, source: str) -> str:
        normalized = source.replace("\r\n", "\n").replace("\r", "\n")
        cleaned: List[str] = []
        previous_blank = True
        in_raw_string = False

        for line in normalized.split("\n"):
            if in_raw_string:
                cleaned.append(line)
                in_raw_string = line.count("`") % 2 == 0
                previous_blank = False
                continue

            stripped = line.rstrip()
            if not stripped:
                if previous_blank:
                    continue
                previous_blank = True
                cleaned.append("")
                continue

            # Blank line before a closing brace is noise left by template loops.
            if stripped.lstrip() in {")", "}"} and cleaned and cleaned[-1] == "":
                cleaned.pop()

            if line.count("`") % 2 == 1:
                # Raw string literal opens here; keep its text verbatim.
                cleaned.append(line)
                in_raw_string = True
            else:
                cleaned.append(stripped)
            previous_blank = False

        while cleaned and cleaned[-1] == "":
            cleaned.pop()

        return "\n".join(cleaned) + "\n"


__all__ = ["GoSourceFormatter"]
