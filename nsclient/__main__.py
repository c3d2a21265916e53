import os
import sys

from .utils import enable_faulthandler, env_bool


def gui() -> int:
    if env_bool("NSCLIENT_FAULTHANDLER", True):
        enable_faulthandler(os.path.join(os.getcwd(), "nsclient_fault.log"))

    from .ui.qt_app import run

    return run(os.getenv("NSCLIENT_BASE_URL"))


def main() -> int:
    args = [a for a in sys.argv[1:] if a]
    if args:
        from .cli import main as cli_main

        return cli_main(args)
    return gui()


if __name__ == "__main__":
    raise SystemExit(main())
