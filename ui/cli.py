from __future__ import annotations

from wsl_installer.main import main as core_main


def main(argv: list[str] | None = None) -> int:
    # The driving shell and a console user must see identical behaviour,
    # so this wrapper only forwards to the core entrypoint.
    return core_main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
