from __future__ import annotations

import argparse
from collections.abc import Sequence

from create_next2d_app import __version__
from create_next2d_app.app import collect_env_info, create_app
from create_next2d_app.config import DEFAULT_TEMPLATE, load_settings, resolve_config_path
from create_next2d_app.console import configure_console_output, eprint, error
from create_next2d_app.errors import CreateAppError, InvalidProjectName

PROG = "create-next2d-app"
ISSUES_URL = "https://github.com/Next2D/create-next2d-app/issues/new"


def _help_footer() -> str:
    return "\n".join(
        [
            "    A custom --template can be one of:",
            f"      - a custom template published on npm default: {DEFAULT_TEMPLATE}",
            "        (a `template` key in the --config file replaces this default)",
            "",
            "    If you have any problems, do not hesitate to file an issue:",
            f"      {ISSUES_URL}",
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        usage="%(prog)s <project-directory> [options]",
        description="Create a new Next2D project from a template package.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_help_footer(),
    )
    parser.add_argument("project_directory", nargs="?", metavar="project-directory")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--info", action="store_true", help="print environment debug info")
    parser.add_argument(
        "--template",
        metavar="path-to-template",
        help="specify a template for the created project",
    )
    parser.add_argument(
        "--config",
        metavar="path",
        help="YAML file overriding the packaged defaults (also: CREATE_NEXT2D_APP_CONFIG).",
    )
    return parser


def _print_missing_project_directory() -> None:
    eprint("Please specify the project directory:")
    print(f"  {PROG} <project-directory>")
    print()
    print("For example:")
    print(f"  {PROG} my-next2d-app")
    print()
    print(f"Run {PROG} --help to see all options.")


def main(argv: Sequence[str] | None = None) -> int:
    configure_console_output()
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        settings = load_settings(resolve_config_path(args.config))

        if args.info:
            print("\n".join(collect_env_info(settings)))
            if not args.project_directory:
                return 0

        if not args.project_directory:
            _print_missing_project_directory()
            return 1

        return create_app(args.project_directory, settings=settings, template=args.template)
    except InvalidProjectName as exc:
        eprint(str(exc))
        return 1
    except CreateAppError as exc:
        error(str(exc))
        return 1
