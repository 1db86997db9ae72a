"""
prompts.py — Guided Component Forge
====================================
Prompt factory functions, one per generation template:
  - react_component_prompt()
  - stylesheet_prompt()
  - declaration_prompt()
  - main_tsx_prompt()
  - readme_prompt()
  - simple_declaration_prompt()
  - evaluation_prompt()
  - spec_prompt()
  - research_api_prompt()

Every factory returns a list of role/content message dicts ready for llm.invoke().
"""

import json

from codegen.utils import format_dependencies, props_to_json, serialize_props_for_prompt

SYSTEM_CODE = (
    "You are an expert React + TypeScript developer who builds Webflow code components. "
    "Respond ONLY with the requested file content. No explanation, no markdown code fences."
)

SYSTEM_JSON = (
    "You are a meticulous reviewer. Respond ONLY with a valid JSON object. "
    "No markdown, no explanation, no code fences."
)


def _feedback_section(feedback: str) -> str:
    # Only present when retrying
    if not feedback:
        return ""
    return f"""
FEEDBACK FROM THE PREVIOUS ATTEMPT — you MUST address ALL of it:
{feedback}
"""


def _messages(system: str, user: str) -> list[dict]:
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def _api_section(spec) -> str:
    if not spec.api_integrations:
        return ""
    blocks = json.dumps(
        [i.model_dump(by_alias=True, exclude_none=True) for i in spec.api_integrations],
        indent=2,
    )
    return f"""
EXTERNAL APIS (use these endpoints and response shapes exactly):
{blocks}
"""


def react_component_prompt(spec, feedback: str = "") -> list[dict]:
    """
    Builds the message list for the pure React component (<Name>.tsx).

    Args:
        spec:     The ComponentSpec being generated.
        feedback: Deterministic-check failures or judge reasoning from the
                  previous iteration, empty on the first attempt.
    """
    prefix = spec.class_prefix
    user = f"""Write {spec.name}.tsx, a self-contained React 19 function component.

COMPONENT: {spec.name}
DESCRIPTION: {spec.description}
NPM DEPENDENCIES: {format_dependencies(spec.npm_dependencies)}

PROPS:
{serialize_props_for_prompt(spec.props)}

PROPS (JSON):
{props_to_json(spec.props)}
{_api_section(spec)}
RULES:
  - Export the props interface as: export interface {spec.name}Props {{ ... }}
  - Export the component as: export default function {spec.name}(props)
  - Every className token MUST start with wf-{prefix} (root element: "wf-{prefix}",
    children: "wf-{prefix}-<element>"). Template literals may interpolate modifiers.
  - Do NOT import any CSS file here — styles are imported by the .webflow.tsx file.
  - No design systems or utility frameworks (no Tailwind, shadcn, MUI, Chakra, Mantine).
  - Use semantic HTML and ARIA attributes; keyboard-operable controls.
  - Give every prop a sensible default in the destructuring.
{_feedback_section(feedback)}"""
    return _messages(SYSTEM_CODE, user)


def stylesheet_prompt(spec, react_component_code: str, feedback: str = "") -> list[dict]:
    """Builds the message list for <Name>.css, conditioned on the component text."""
    prefix = spec.class_prefix
    user = f"""Write {spec.name}.css for the React component below.

COMPONENT: {spec.name}
DESCRIPTION: {spec.description}

PROPS:
{serialize_props_for_prompt(spec.props)}

REACT COMPONENT:
{react_component_code}

RULES:
  - Style every class used by the component; all selectors start with .wf-{prefix}.
  - The root rule .wf-{prefix} MUST declare:
        font-family: inherit;
        color: inherit;
        line-height: inherit;
  - Site variables MUST have fallbacks: var(--site-color, #1a1a1a).
    Component-private custom properties use the --wf- prefix and need no fallback.
  - Plain CSS only. No Tailwind directives, no preprocessors.
{_feedback_section(feedback)}"""
    return _messages(SYSTEM_CODE, user)


def declaration_prompt(spec, react_component_code: str, feedback: str = "") -> list[dict]:
    """Builds the message list for <Name>.webflow.tsx (declareComponent call)."""
    user = f"""Write {spec.name}.webflow.tsx, the Webflow declaration of the component below.

COMPONENT: {spec.name}
DESCRIPTION: {spec.description}
GROUP: {spec.group}

PROPS:
{serialize_props_for_prompt(spec.props)}

PROPS (JSON):
{props_to_json(spec.props)}

REACT COMPONENT:
{react_component_code}

RULES:
  - import {spec.name} from "./{spec.name}";
  - import {{ props }} from "@webflow/data-types";
  - import {{ declareComponent }} from "@webflow/react";
  - import "./{spec.name}.css";   (the ONLY place the stylesheet is imported)
  - export default declareComponent({spec.name}, {{ name, description, group: "{spec.group}", props: {{ ... }} }})
  - Every props.<Type>({{ ... }}) block MUST include a group: field.
  - If the component uses useState, useEffect, useRef, window or document,
    set options: {{ ssr: false }}.
{_feedback_section(feedback)}"""
    return _messages(SYSTEM_CODE, user)


def main_tsx_prompt(spec) -> list[dict]:
    """Local dev entry point (src/main.tsx) with a light/dark theme preview."""
    user = f"""Write src/main.tsx, the Vite dev entry point that previews {spec.name}.

COMPONENT: {spec.name}
DESCRIPTION: {spec.description}

PROPS:
{serialize_props_for_prompt(spec.props)}

RULES:
  - Render <{spec.name} /> into #root with createRoot from react-dom/client.
  - Import the component from "./components/{spec.name}/{spec.name}" and its CSS
    from "./components/{spec.name}/{spec.name}.css".
  - Add a small theme switcher (light / dark) that sets site variables on :root
    so the component's var() fallbacks can be previewed against real values.
  - Pass realistic sample values for every prop.
"""
    return _messages(SYSTEM_CODE, user)


def readme_prompt(spec, css_code: str) -> list[dict]:
    """README.md following the fixed section layout."""
    deps = (
        "\n".join(
            f"- [{k}](https://www.npmjs.com/package/{k}) @ {v}"
            for k, v in spec.npm_dependencies.items()
        )
        if spec.npm_dependencies
        else "None beyond React."
    )
    user = f"""Write README.md for the Webflow code component {spec.name}.

DESCRIPTION: {spec.description}

PROPS:
{serialize_props_for_prompt(spec.props)}

DEPENDENCIES:
{deps}

STYLESHEET (list every site variable it reads, with its fallback):
{css_code}

SECTIONS (in this order): Title, Overview, Props (markdown table: name, type,
default, group, description), Site Variables, Local Development
(npm install / npm run dev), Deploying to Webflow (npx webflow library share),
Dependencies.
Respond with raw markdown only.
"""
    return _messages(SYSTEM_CODE, user)


def simple_declaration_prompt(spec, full_declaration_code: str, react_component_code: str) -> list[dict]:
    """Reduced-prop declaration (<Name>Simple.webflow.tsx) for client editors."""
    user = f"""Write {spec.name}Simple.webflow.tsx: a simplified declaration of {spec.name}
that exposes only the core content props a client editor needs.

FULL DECLARATION:
{full_declaration_code}

REACT COMPONENT:
{react_component_code}

RULES:
  - Same imports as the full declaration, including import "./{spec.name}.css".
  - name: "{spec.name} (Simple)", group: "{spec.group}".
  - Keep content props (text, rich text, images, links, visibility); drop styling
    and layout props. Every kept props.<Type>({{ ... }}) block keeps its group: field.
  - Keep the same options.ssr setting as the full declaration.
"""
    return _messages(SYSTEM_CODE, user)


def evaluation_prompt(spec, artifacts) -> list[dict]:
    """
    Rubric judge for an artifact set that already passed the deterministic checks.
    The LLM must respond with the JSON structure shown — confidence is NOT requested,
    it is derived from the criterion scores.
    """
    prefix = spec.class_prefix
    user = f"""Evaluate this Webflow code component against the description and best practices.

COMPONENT: {spec.name}   (kebab: {spec.kebab_name}, CSS prefix: wf-{prefix})
DESCRIPTION: {spec.description}

─── {spec.name}.tsx ───
{artifacts.react_component}

─── {spec.name}.css ───
{artifacts.stylesheet}

─── {spec.name}.webflow.tsx ───
{artifacts.declaration}
───────────────────────

Score each criterion 0-100 with short notes:
  functionalityCompleteness (weight 25) — every described feature and behaviour works
  propWiring                (weight 20) — every declared prop is used and changes output
  cssCompleteness           (weight 20) — every class styled, responsive, states covered
  semanticHtml              (weight 15) — correct elements and landmarks
  accessibility             (weight 10) — ARIA, focus handling, keyboard support
  codeQuality               (weight 10) — types, naming, no dead code

Return ONLY this JSON structure:
{{
  "score": 0,
  "reasoning": "what must change to reach a higher score",
  "criteria": {{
    "functionalityCompleteness": {{"score": 0, "notes": ""}},
    "propWiring": {{"score": 0, "notes": ""}},
    "cssCompleteness": {{"score": 0, "notes": ""}},
    "semanticHtml": {{"score": 0, "notes": ""}},
    "accessibility": {{"score": 0, "notes": ""}},
    "codeQuality": {{"score": 0, "notes": ""}}
  }}
}}
"""
    return _messages(SYSTEM_JSON, user)


COMPLEXITY_HINTS = {
    "simple": "~5-10 props, basic UI",
    "standard": "~15-25 props",
    "complex": "~25-40 props, multiple sections and interactions",
}


def spec_prompt(description: str, complexity: str = "standard") -> list[dict]:
    """Turns a plain English description into a component specification."""
    hint = COMPLEXITY_HINTS.get(complexity, COMPLEXITY_HINTS["standard"])
    user = f"""Design a Webflow code component for this request:

{description}

COMPLEXITY: {complexity} ({hint})

Prop types: Id, Variant, Boolean, Visibility, Number, Text, TextNode, RichText, Slot, Image, Link.
  - Variant props MUST list options; no other prop type takes options.
  - defaultValue must match the type: Boolean/Visibility → true/false,
    Number → a number, text-like and Variant → a string (Variant: one of options).
    Slot props have no defaultValue.
  - Give every prop a group (Settings, Content, Style, Display, Behavior or custom).

Return ONLY this JSON structure:
{{
  "componentName": "PascalCaseName",
  "description": "detailed description with features and behaviours",
  "group": "Components",
  "npmDependencies": {{}},
  "props": [
    {{"name": "camelCase", "type": "Text", "description": "", "defaultValue": "", "group": "Content"}}
  ]
}}
"""
    return _messages(SYSTEM_JSON, user)


def research_api_prompt(spec) -> list[dict]:
    """Detects external API integrations the component needs."""
    user = f"""Does the component below need data from an external HTTP API?

COMPONENT: {spec.name}
DESCRIPTION: {spec.description}

PROPS (JSON):
{props_to_json(spec.props)}

If yes, describe each integration precisely (endpoint with placeholders, auth,
TypeScript interface of the response with optional fields marked ?).

Return ONLY this JSON structure:
{{
  "hasApis": false,
  "integrations": [
    {{
      "service": "",
      "endpoint": "",
      "authMethod": "none",
      "authParamName": "",
      "requiredParams": {{}},
      "responseShape": "",
      "notes": ""
    }}
  ]
}}
"""
    return _messages(SYSTEM_JSON, user)
