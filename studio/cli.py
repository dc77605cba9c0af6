"""Command-line entry point: check and inspect saved documents."""
from __future__ import annotations

import json
import logging
import sys
from typing import Any

from studio import __version__
from studio.config import settings
from studio.kernel.document import find_page, find_project, load_document
from studio.kernel.types import DocumentError, TreeValidationError
from studio.kernel.validation import validate_tree


def print_help():
    """Print help message."""
    print(f"""
Studio Kernel v{__version__}

Usage:
  studio-kernel <command> FILE [options]

Commands:
  validate FILE     Check a document or a bare tree array, print every issue
  tree FILE         Print the outline of a page

Options:
  --page ID         Page to outline (default: the project's current page)
  -h, --help        Show this help
  -v, --version     Show version

Environment:
  STUDIO_LOG_LEVEL  Log level (default: WARNING)
""")


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        command: str | None (validate, tree)
        file: str | None
        page_id: str | None
        show_help: bool
        show_version: bool
    """
    result = {
        "command": None,
        "file": None,
        "page_id": None,
        "show_help": False,
        "show_version": False,
    }

    i = 0
    while i < len(args):
        arg = args[i]

        if arg in ("validate", "tree") and result["command"] is None:
            result["command"] = arg
        elif arg == "--page":
            if i + 1 < len(args):
                result["page_id"] = args[i + 1]
                i += 1
            else:
                print("Error: --page requires an ID")
                sys.exit(1)
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-"):
            print(f"Unknown option: {arg}")
            print("Run 'studio-kernel --help' for usage.")
            sys.exit(1)
        elif result["command"] is not None and result["file"] is None:
            result["file"] = arg
        else:
            print(f"Unknown command: {arg}")
            print("Run 'studio-kernel --help' for usage.")
            sys.exit(1)

        i += 1

    return result


def read_json(path: str) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def outline(tree: list[dict[str, Any]], depth: int = 0) -> list[str]:
    """One line per node: indented type, id and name."""
    lines = []
    for node in tree:
        label = f"{node.get('type')} #{node.get('id')}"
        if node.get("name"):
            label += f' "{node["name"]}"'
        if node.get("is_global_instance"):
            label += f" (instance of {node.get('global_component_id')})"
        lines.append("  " * depth + label)
        lines.extend(outline(node.get("children") or [], depth + 1))
    return lines


def cmd_validate(data: Any) -> int:
    if isinstance(data, list):
        result = validate_tree(data)
        print(result.format())
        return 0 if result.valid else 1

    try:
        projects, _ = load_document(data)
    except TreeValidationError as e:
        print(f"Invalid {e.context}:")
        print(e.result.format())
        return 1
    except DocumentError as e:
        print(str(e))
        return 1

    pages = sum(len(p["pages"]) for p in projects)
    print(f"Document is valid: {len(projects)} project(s), {pages} page(s)")
    return 0


def cmd_tree(data: Any, page_id: str | None) -> int:
    if isinstance(data, list):
        tree = data
    else:
        try:
            projects, current_project_id = load_document(data)
        except (DocumentError, TreeValidationError) as e:
            print(str(e))
            return 1
        project = find_project(projects, current_project_id)
        page = find_page(project, page_id or project["current_page_id"])
        if page is None:
            print(f"Page not found: {page_id}")
            return 1
        print(f"{project['name']} / {page['name']}")
        tree = page["tree"]

    for line in outline(tree):
        print(line)
    return 0


def main():
    """Main entry point."""
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args(sys.argv[1:])

    if args["show_help"]:
        print_help()
        return

    if args["show_version"]:
        print(f"studio-kernel {__version__}")
        return

    if args["command"] is None or args["file"] is None:
        print_help()
        sys.exit(1)

    try:
        data = read_json(args["file"])
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read {args['file']}: {e}")
        sys.exit(1)

    if args["command"] == "validate":
        sys.exit(cmd_validate(data))
    sys.exit(cmd_tree(data, args["page_id"]))


if __name__ == "__main__":
    main()
