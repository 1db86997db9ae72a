"""
build_validator.py — Guided Component Forge
============================================
Validates a written component directory:

  1. npm install --ignore-scripts --no-audit --no-fund   (retried, timeout)
  2. npx tsc --noEmit                                    (single attempt, timeout)

Failures are advisory: they are reported in the result and never abort
the pipeline.
"""

import pathlib
import subprocess

from tenacity import Retrying, stop_after_attempt, wait_fixed

from codegen import config
from codegen.states import BuildValidation

INSTALL_COMMAND = ["npm", "install", "--ignore-scripts", "--no-audit", "--no-fund"]
TSC_COMMAND = ["npx", "tsc", "--noEmit"]
TSC_ERROR_MARKER = ": error TS"


def run_process(command: list[str], cwd: pathlib.Path, timeout: float) -> subprocess.CompletedProcess:
    """Default process runner; raises CalledProcessError on a non-zero exit."""
    return subprocess.run(
        command,
        cwd=str(cwd),
        timeout=timeout,
        capture_output=True,
        text=True,
        check=True,
    )


class BuildValidator:
    """
    Args:
        runner:           Callable(command, cwd, timeout) → CompletedProcess,
                          raising CalledProcessError / TimeoutExpired on failure.
        install_timeout:  Seconds per install attempt.
        install_attempts: Install attempts before giving up.
        tsc_timeout:      Seconds for the single type-check run.
    """

    def __init__(
        self,
        runner=run_process,
        install_timeout: float = config.INSTALL_TIMEOUT,
        install_attempts: int = config.INSTALL_ATTEMPTS,
        tsc_timeout: float = config.TSC_TIMEOUT,
        install_wait=None,
    ) -> None:
        self.runner = runner
        self.install_timeout = install_timeout
        self.install_attempts = install_attempts
        self.tsc_timeout = tsc_timeout
        self.install_wait = install_wait if install_wait is not None else wait_fixed(2)

    def install_deps(self, output_dir: pathlib.Path) -> tuple[bool, str | None]:
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self.install_attempts),
                wait=self.install_wait,
                reraise=True,
            ):
                with attempt:
                    number = attempt.retry_state.attempt_number
                    print(f"[build] npm install (attempt {number}/{self.install_attempts})...")
                    self.runner(INSTALL_COMMAND, output_dir, self.install_timeout)
        except subprocess.TimeoutExpired:
            return False, f"timed out after {self.install_timeout:g}s"
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip()
            return False, detail or f"exit code {exc.returncode}"
        except OSError as exc:
            return False, str(exc)
        return True, None

    def run_tsc(self, output_dir: pathlib.Path) -> BuildValidation:
        print("[build] npx tsc --noEmit...")
        try:
            self.runner(TSC_COMMAND, output_dir, self.tsc_timeout)
        except subprocess.TimeoutExpired:
            message = f"tsc --noEmit timed out after {self.tsc_timeout:g}s"
            return BuildValidation(passed=False, error_count=1, errors=[message])
        except subprocess.CalledProcessError as exc:
            raw = f"{exc.stdout or ''}\n{exc.stderr or ''}"
            errors = parse_tsc_errors(raw)
            return BuildValidation(passed=False, error_count=len(errors), errors=errors)
        except OSError as exc:
            return BuildValidation(passed=False, error_count=1, errors=[f"tsc could not be started: {exc}"])
        return BuildValidation(passed=True, error_count=0, errors=[])

    def validate(self, output_dir: pathlib.Path | str) -> BuildValidation:
        output_dir = pathlib.Path(output_dir)
        ok, error = self.install_deps(output_dir)
        if not ok:
            print(f"[build] ❌ npm install failed: {error}")
            return BuildValidation(
                passed=False,
                error_count=1,
                errors=[f"npm install failed: {error or 'unknown error'}"],
            )

        result = self.run_tsc(output_dir)
        label = "✅ PASSED" if result.passed else f"❌ FAILED ({result.error_count} errors)"
        print(f"[build] Type check {label}")
        return result


def parse_tsc_errors(output: str) -> list[str]:
    """tsc errors look like: src/components/Foo/Foo.tsx(12,5): error TS2307: Cannot find module..."""
    return [line.strip() for line in output.splitlines() if TSC_ERROR_MARKER in line]
