from __future__ import annotations

import shlex
from typing import Sequence


def render_setup_script(
    *,
    packages: Sequence[str],
    node_major: int,
    app_package: str,
    app_command: str,
) -> str:
    """Render the POSIX payload run as root inside the guest.

    set -eu makes any failing command end the script non-zero. Nothing is
    piped into a shell because a plain POSIX sh has no pipefail.
    """

    pkgs = " ".join(shlex.quote(p) for p in packages)
    setup_url = f"https://deb.nodesource.com/setup_{int(node_major)}.x"
    return f"""#!/bin/sh
set -eu
export DEBIAN_FRONTEND=noninteractive

apt-get update
apt-get install -y --no-install-recommends {pkgs}

curl -fsSL {shlex.quote(setup_url)} -o /tmp/nodesource_setup.sh
bash /tmp/nodesource_setup.sh
rm -f /tmp/nodesource_setup.sh
apt-get install -y nodejs

npm install -g {shlex.quote(app_package)}
{shlex.quote(app_command)} --version
"""


def app_check_command(app_command: str) -> str:
    cmd = shlex.quote(app_command)
    return f"command -v {cmd} >/dev/null 2>&1 && {cmd} --version >/dev/null 2>&1"
