"""
assembler.py — Guided Component Forge
======================================
Turns the accepted (or best-effort) artifact set into a complete Vite +
Webflow project directory:

  <output_root>/<kebab-name>/
      package.json, webflow.json, vite.config.ts, tsconfig*.json, index.html
      README.md
      src/main.tsx
      src/components/<Name>/<Name>.tsx | .css | .webflow.tsx | Simple.webflow.tsx
"""

import json
import pathlib

from codegen.generator import ArtifactGenerator, ArtifactKind
from codegen.states import ArtifactSet
from codegen.utils import strip_code_fences

SOURCE_SUFFIXES = (".ts", ".tsx", ".css")

BASE_DEPENDENCIES = {
    "react": "^19.1.1",
    "react-dom": "^19.1.1",
}

DEV_DEPENDENCIES = {
    "@types/react": "^19.1.13",
    "@types/react-dom": "^19.1.9",
    "@vitejs/plugin-react": "^5.0.3",
    "@webflow/data-types": "^1.0.1",
    "@webflow/react": "^1.0.1",
    "@webflow/webflow-cli": "^1.8.44",
    "typescript": "~5.8.3",
    "vite": "^7.1.7",
}

_STRICT_OPTIONS = {
    "skipLibCheck": True,
    "moduleResolution": "bundler",
    "allowImportingTsExtensions": True,
    "verbatimModuleSyntax": True,
    "noEmit": True,
    "strict": True,
    "noUnusedLocals": True,
    "noUnusedParameters": True,
    "noFallthroughCasesInSwitch": True,
    "noUncheckedSideEffectImports": True,
}


def _dump(data: dict) -> str:
    return json.dumps(data, indent=2)


def build_scaffold_files(spec) -> dict[str, str]:
    """Project boilerplate computed purely from spec fields. No LLM."""
    package_json = {
        "name": spec.kebab_name,
        "private": True,
        "version": "0.0.0",
        "type": "module",
        "scripts": {
            "dev": "vite",
            "build": "tsc -b && vite build",
            "preview": "vite preview",
        },
        "dependencies": {**BASE_DEPENDENCIES, **spec.npm_dependencies},
        "devDependencies": DEV_DEPENDENCIES,
    }

    webflow_json = {
        "library": {
            "name": spec.name,
            "components": ["./src/**/*.webflow.@(js|jsx|mjs|ts|tsx)"],
            "description": spec.description,
            "id": spec.kebab_name,
        }
    }

    vite_config = """import { defineConfig } from "vite";
import react from "@vitejs/plugin-react";

export default defineConfig({
  plugins: [react()],
});
"""

    tsconfig = {
        "files": [],
        "references": [
            {"path": "./tsconfig.app.json"},
            {"path": "./tsconfig.node.json"},
        ],
    }

    tsconfig_app = {
        "compilerOptions": {
            "tsBuildInfoFile": "./node_modules/.tmp/tsconfig.app.tsBuildInfo",
            "target": "ES2022",
            "useDefineForClassFields": True,
            "lib": ["ES2022", "DOM", "DOM.Iterable"],
            "module": "ESNext",
            "jsx": "react-jsx",
            **_STRICT_OPTIONS,
        },
        "include": ["src"],
    }

    tsconfig_node = {
        "compilerOptions": {
            "tsBuildInfoFile": "./node_modules/.tmp/tsconfig.node.tsBuildInfo",
            "target": "ES2023",
            "lib": ["ES2023"],
            "module": "ESNext",
            **_STRICT_OPTIONS,
        },
        "include": ["vite.config.ts"],
    }

    index_html = f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{spec.name}</title>
  </head>
  <body>
    <div id="root"></div>
    <script type="module" src="/src/main.tsx"></script>
  </body>
</html>
"""

    return {
        "package.json": _dump(package_json),
        "webflow.json": _dump(webflow_json),
        "vite.config.ts": vite_config,
        "tsconfig.json": _dump(tsconfig),
        "tsconfig.app.json": _dump(tsconfig_app),
        "tsconfig.node.json": _dump(tsconfig_node),
        "index.html": index_html,
    }


def generate_auxiliary_artifacts(generator: ArtifactGenerator, spec, artifacts: ArtifactSet) -> dict[ArtifactKind, str]:
    """
    Once-only artifacts generated after the quality loop (never retried by it):
    preview entry point, README and the reduced-prop declaration.
    """
    siblings = {
        ArtifactKind.REACT_COMPONENT: artifacts.react_component,
        ArtifactKind.STYLESHEET: artifacts.stylesheet,
        ArtifactKind.DECLARATION: artifacts.declaration,
    }
    aux = {}
    for kind in (ArtifactKind.MAIN_TSX, ArtifactKind.README, ArtifactKind.SIMPLE_DECLARATION):
        print(f"[assembler] Generating {kind.value}...")
        aux[kind] = generator.generate(kind, spec, siblings)
    return aux


def assemble_files(spec, scaffold: dict[str, str], artifacts: ArtifactSet, aux: dict[ArtifactKind, str]) -> dict[str, str]:
    """Merges scaffold + core artifacts + auxiliaries into one relative-path map."""
    component_dir = f"src/components/{spec.name}"
    return {
        **scaffold,
        "src/main.tsx": aux[ArtifactKind.MAIN_TSX],
        f"{component_dir}/{spec.name}.tsx": artifacts.react_component,
        f"{component_dir}/{spec.name}.css": artifacts.stylesheet,
        f"{component_dir}/{spec.name}.webflow.tsx": artifacts.declaration,
        f"{component_dir}/{spec.name}Simple.webflow.tsx": aux[ArtifactKind.SIMPLE_DECLARATION],
        "README.md": aux[ArtifactKind.README],
    }


def write_files(output_root: pathlib.Path | str, kebab_name: str, files: dict[str, str]) -> tuple[pathlib.Path, int]:
    """
    Writes every entry under <output_root>/<kebab_name>/, creating parent
    directories. Source files get one last fence strip as a safety net.

    Returns (absolute output dir, number of files written).
    """
    output_dir = (pathlib.Path(output_root) / kebab_name).resolve()
    written = 0
    for relative_path, content in files.items():
        full_path = output_dir / relative_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        if relative_path.endswith(SOURCE_SUFFIXES):
            content = strip_code_fences(content)
        full_path.write_text(content, encoding="utf-8")
        written += 1
    print(f"[assembler] Wrote {written} file(s) to {output_dir}")
    return output_dir, written
