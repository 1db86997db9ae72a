"""
checks.py — Guided Component Forge
===================================
Deterministic checks (regex / rule-based, no LLM) over one artifact set:

  1.  CSS class prefix            wf-<prefix> on every className token
  2.  Typography inheritance      .wf-<prefix> inherits font-family / color / line-height
  3.  Site variable fallbacks     var(--x, fallback) except private --wf-*
  4.  No design systems           deny-listed ecosystem keywords
  5.  CSS import placement        only in .webflow.tsx
  6.  Props interface exported    export interface <Name>Props
  7.  Default export present      export default function
  8.  declareComponent present
  9.  Props grouped               group: in every props.<Type>({...})
  10. SSR flag                    ssr: false when browser APIs are used
  11. No code fences left
"""

import re

from codegen.states import ArtifactSet, CheckResult, DeterministicChecks

DESIGN_SYSTEM_KEYWORDS = ["tailwind", "@tailwind", "shadcn", "@mui", "@chakra", "@mantine"]

_CLASSNAME_STRING = re.compile(r'className="([^"]*)"')
_CLASSNAME_TEMPLATE = re.compile(r"className=\{`([^`]*)`\}")
_INTERPOLATION = re.compile(r"\$\{[^}]*\}")
_VAR_OPEN = re.compile(r"\bvar\(\s*(--[\w-]+)")
_PROP_BLOCK = re.compile(r"props\.(\w+)\(\{[^}]+\}")
_PROP_LABEL = re.compile(r"""name:\s*["'`]([^"'`]+)["'`]""")
_BROWSER_APIS = re.compile(r"\b(?:useState|useEffect|useRef)\b|\b(?:window|document)\.")
_SSR_FALSE = re.compile(r"ssr:\s*false")
_FENCE_LINE = re.compile(r"^```[\w+#.-]*\s*$", re.MULTILINE)


def _class_prefix_failures(prefix: str, react_code: str) -> list[str]:
    expected = f"wf-{prefix}"
    failures = []
    for match in _CLASSNAME_STRING.finditer(react_code):
        for cls in match.group(1).split():
            if not cls.startswith(expected):
                failures.append(f'CSS class "{cls}" does not use the {expected}- prefix')
    for match in _CLASSNAME_TEMPLATE.finditer(react_code):
        static = _INTERPOLATION.sub(" ", match.group(1))
        for cls in static.split():
            if not cls.startswith(expected):
                failures.append(
                    f'CSS class "{cls}" in template literal does not use the {expected}- prefix'
                )
    return failures


def _missing_typography(prefix: str, css: str) -> list[str]:
    # The selector must be exactly .wf-<prefix>: it opens the stylesheet or
    # follows the end of a previous rule or comment
    root = re.search(rf"(?:\A|[}}/])\s*\.wf-{re.escape(prefix)}\s*\{{([^}}]*)\}}", css)
    block = root.group(1) if root else ""
    wanted = {
        "font-family: inherit": r"(?<![\w-])font-family\s*:\s*inherit\b",
        "color: inherit": r"(?<![\w-])color\s*:\s*inherit\b",
        "line-height: inherit": r"(?<![\w-])line-height\s*:\s*inherit\b",
    }
    return [label for label, pattern in wanted.items() if not re.search(pattern, block)]


def _var_references(css: str):
    """
    Yields (name, reference text, has fallback) for every var( opening,
    nested references included.
    """
    for match in _VAR_OPEN.finditer(css):
        depth = 0
        has_fallback = False
        end = len(css)
        for i in range(match.start() + 3, len(css)):
            ch = css[i]
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    end = i + 1
                    break
            elif ch == "," and depth == 1:
                has_fallback = True
        yield match.group(1), css[match.start():end], has_fallback


def _variable_fallback_failures(css: str) -> list[str]:
    failures = []
    for name, ref, has_fallback in _var_references(css):
        if name.startswith("--wf-"):
            continue  # component-private custom property
        if not has_fallback:
            failures.append(f"{ref} in CSS is missing a fallback value — use var(--name, fallback)")
    return failures


def run_deterministic_checks(component_name: str, artifacts: ArtifactSet) -> CheckResult:
    """
    Evaluates every rule in fixed order. Each violated instance adds one
    failure message; the aggregate pass flag is the AND of all rules.
    """
    react_code = artifacts.react_component
    css = artifacts.stylesheet
    declaration = artifacts.declaration
    prefix = component_name.lower()
    failures: list[str] = []

    # ── 1. CSS class prefix ──────────────────────────────────────────────────
    prefix_failures = _class_prefix_failures(prefix, react_code)
    failures.extend(prefix_failures)

    # ── 2. Typography inheritance on the root class ─────────────────────────
    missing = _missing_typography(prefix, css)
    if missing:
        failures.append(
            f"Root class .wf-{prefix} is missing typography inheritance: {', '.join(missing)}"
        )

    # ── 3. Site variable fallbacks ───────────────────────────────────────────
    var_failures = _variable_fallback_failures(css)
    failures.extend(var_failures)

    # ── 4. No design system references ───────────────────────────────────────
    all_code = (react_code + css + declaration).lower()
    found_keywords = [kw for kw in DESIGN_SYSTEM_KEYWORDS if kw in all_code]
    for kw in found_keywords:
        failures.append(f'Found design system reference "{kw}" — no design systems allowed')

    # ── 5. CSS import only in the declaration ───────────────────────────────
    css_file = f"{component_name}.css"
    css_in_webflow = css_file in declaration
    css_in_react = ".css" in react_code
    if not css_in_webflow:
        failures.append(f'CSS file "{css_file}" is not imported in .webflow.tsx — it must be imported there')
    if css_in_react:
        failures.append(f"CSS is imported in {component_name}.tsx — CSS should only be imported in .webflow.tsx")

    # ── 6. Props interface exported ─────────────────────────────────────────
    interface_exported = re.search(rf"export\s+interface\s+{re.escape(component_name)}Props\b", react_code) is not None
    if not interface_exported:
        failures.append(f'Missing "export interface {component_name}Props" in React component')

    # ── 7. Default export ────────────────────────────────────────────────────
    default_export = re.search(r"export\s+default\s+function\b", react_code) is not None
    if not default_export:
        failures.append('Missing "export default function" in React component')

    # ── 8. declareComponent call ─────────────────────────────────────────────
    declare_present = "declareComponent" in declaration
    if not declare_present:
        failures.append('Missing "declareComponent" call in .webflow.tsx')

    # ── 9. Every prop block grouped ──────────────────────────────────────────
    props_grouped = True
    for block in _PROP_BLOCK.finditer(declaration):
        if "group:" not in block.group(0):
            props_grouped = False
            label = _PROP_LABEL.search(block.group(0))
            which = f' "{label.group(1)}"' if label else ""
            failures.append(
                f"A props.{block.group(1)} declaration{which} in .webflow.tsx is missing the \"group:\" field"
            )

    # ── 10. SSR flag ─────────────────────────────────────────────────────────
    uses_browser_apis = _BROWSER_APIS.search(react_code) is not None
    ssr_correct = not uses_browser_apis or _SSR_FALSE.search(declaration) is not None
    if not ssr_correct:
        failures.append(
            "Component uses browser APIs (useState/useEffect/useRef/window/document) "
            "but .webflow.tsx does not set ssr: false"
        )

    # ── 11. Leftover code fences ─────────────────────────────────────────────
    no_fences = True
    for label, code in (("React component", react_code), ("CSS", css), ("Webflow declaration", declaration)):
        if _FENCE_LINE.search(code):
            no_fences = False
            failures.append(f"{label} contains markdown code fences (```) — these must be stripped")

    checks = DeterministicChecks(
        class_prefix_correct=not prefix_failures,
        typography_inherited=not missing,
        site_variable_fallbacks=not var_failures,
        no_design_system_imports=not found_keywords,
        css_import_in_webflow=css_in_webflow and not css_in_react,
        interface_exported=interface_exported,
        default_export_present=default_export,
        declare_component_present=declare_present,
        props_grouped=props_grouped,
        ssr_flag_correct=ssr_correct,
        no_code_fences=no_fences,
    )
    return CheckResult(checks=checks, failures=failures)


def build_deterministic_feedback(result: CheckResult) -> str:
    """Numbered failure list handed to the next generation round."""
    if not result.failures:
        return ""
    lines = "\n".join(f"{i}. {f}" for i, f in enumerate(result.failures, start=1))
    return f"The following deterministic checks FAILED. You MUST fix each one:\n\n{lines}"
