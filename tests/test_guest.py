from __future__ import annotations

from wsl_installer.lib.guest import app_check_command, render_setup_script


def test_script_installs_runtime_and_app_and_verifies():
    script = render_setup_script(
        packages=["ca-certificates", "curl"],
        node_major=22,
        app_package="@scope/tool",
        app_command="tool",
    )
    lines = script.splitlines()
    assert lines[0] == "#!/bin/sh"
    assert lines[1] == "set -eu"
    assert "apt-get update" in lines
    assert "apt-get install -y --no-install-recommends ca-certificates curl" in lines
    assert "https://deb.nodesource.com/setup_22.x" in script
    assert "npm install -g @scope/tool" in lines
    assert lines[-1] == "tool --version"
    # No pipes into a shell: sh has no pipefail.
    assert "| bash" not in script and "| sh" not in script


def test_values_are_shell_quoted():
    script = render_setup_script(
        packages=["a b"],
        node_major=20,
        app_package="pkg; rm -rf /",
        app_command="x",
    )
    assert "'a b'" in script
    assert "npm install -g 'pkg; rm -rf /'" in script


def test_app_check_command():
    assert app_check_command("tsc") == "command -v tsc >/dev/null 2>&1 && tsc --version >/dev/null 2>&1"
