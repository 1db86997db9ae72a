"""
utils.py — Guided Component Forge
==================================
Naming helpers, prompt serialisation, fence stripping and JSON extraction.
No LLM calls in here.
"""

import json
import re

_FENCE_OPEN = re.compile(r"^```[\w+#.-]*[ \t]*$")
_FENCE_CLOSE = re.compile(r"^```[ \t]*$")


def to_kebab_case(name: str) -> str:
    """PascalCase → kebab-case  (PricingTable → pricing-table, FAQList → faq-list)."""
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", name)
    name = re.sub(r"([A-Z])([A-Z][a-z])", r"\1-\2", name)
    return name.lower()


def to_class_prefix(name: str) -> str:
    """PricingTable → pricingtable, used for the wf-pricingtable- CSS class prefix."""
    return name.lower()


def serialize_props_for_prompt(props) -> str:
    """Renders the prop list as one readable line per prop for the LLM."""
    lines = []
    for p in props:
        line = f"- {p.name}: {p.kind.value}"
        if p.options:
            line += f" [{', '.join(p.options)}]"
        if p.default is not None:
            line += f" (default: {p.default})"
        if p.group:
            line += f" [group: {p.group}]"
        line += f" — {p.description}"
        lines.append(line)
    return "\n".join(lines)


def props_to_json(props) -> str:
    return json.dumps(
        [p.model_dump(mode="json", exclude_none=True) for p in props],
        indent=2,
    )


def format_dependencies(deps: dict | None) -> str:
    if not deps:
        return "none"
    return ", ".join(f"{k}@{v}" for k, v in deps.items())


def strip_code_fences(text: str) -> str:
    """
    Removes one leading ```lang line and one trailing ``` line from LLM output.

    Only whole marker lines are removed, so interior content (including its
    indentation) is left as-is. Stripping twice gives the same result as
    stripping once.
    """
    lines = text.strip().split("\n")
    if lines and _FENCE_OPEN.match(lines[0].rstrip("\r")):
        lines = lines[1:]
    if lines and _FENCE_CLOSE.match(lines[-1].strip()):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def extract_first_json_object(text: str) -> str | None:
    """
    Returns the first balanced {...} substring of text, or None.
    Braces inside JSON string literals are ignored.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        # Unbalanced from this brace on; try the next opening brace
        start = text.find("{", start + 1)
    return None


def load_json_object(raw: str) -> tuple[dict | None, bool]:
    """
    Staged JSON loading used for every structured LLM reply.

    Returns (data, extracted): data is None when nothing parseable was found;
    extracted is True when the object had to be pulled out of surrounding text.
    """
    text = strip_code_fences(raw or "")
    try:
        data = json.loads(text)
        if isinstance(data, dict):
            return data, False
    except json.JSONDecodeError:
        pass

    candidate = extract_first_json_object(text)
    if candidate is not None:
        try:
            data = json.loads(candidate)
            if isinstance(data, dict):
                return data, True
        except json.JSONDecodeError:
            pass
    return None, False
