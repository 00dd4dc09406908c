"""stylegen: compile parsed style/palette modules into generated C++ sources.

Usage: stylegen generate <tree.json> [options]

Each module produces <base>.h and <base>.cpp (base is `palette` for
*.palette modules, `style_<name>` otherwise). Included modules are
generated first, in dependency order. Palette modules can also write a
sample theme file. Output files are only replaced when every artifact of
a module rendered successfully, and unchanged files are left untouched.

Icon modifiers are auto-discovered from stylegen/modifiers/.
Run `stylegen help <modifier>` for full module docs.

Environment variables / .env loading:
  OS environment variables are always used first.
  If a variable is not set, stylegen looks for a .env file starting from
  the current directory and walking up, stopping at the nearest .git boundary.
  Use --env-file to override the .env location explicitly.
"""

import argparse
import importlib
import os
import sys

from stylegen import registry
from stylegen.core.env import load_config
from stylegen.core.errors import StyleGenError
from stylegen.core.generator import generate_tree
from stylegen.core.report import format_json, format_text
from stylegen.core.tree_loader import parse_tree_file


def _load_modifier_module(name: str) -> object:
    """Load the raw module for a modifier (for docstring access)."""
    return importlib.import_module(f'stylegen.modifiers.{name}')


def _short_doc(name: str, fallback: str) -> str:
    doc = (_load_modifier_module(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else fallback


def _build_parser() -> argparse.ArgumentParser:
    epilog = (
        'Examples:\n'
        '  stylegen generate colors.json -o gen/styles\n'
        '  stylegen generate colors.json -o gen/styles --sample-theme gen/colors.tdesktop-theme\n'
        '  stylegen generate widgets.json --icons-root res/art --json\n'
        '  stylegen modifiers\n'
        '  stylegen help invert\n'
        '\n'
        'Config env vars (set in .env or environment):\n'
        '  STYLEGEN_OUT_DIR, STYLEGEN_ICONS_ROOT, STYLEGEN_PROJECT, STYLEGEN_SAMPLE_THEME\n'
    )
    parser = argparse.ArgumentParser(
        prog='stylegen',
        description='Compile parsed style/palette modules into generated C++ sources.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    sub = parser.add_subparsers(dest='command', help='Command to run')

    gen = sub.add_parser('generate', help='Generate sources for a module tree')
    gen.add_argument('tree', help='Parsed module tree (JSON)')
    gen.add_argument('-o', '--out-dir', help='Output directory (default: STYLEGEN_OUT_DIR or cwd)')
    gen.add_argument('-i', '--icons-root', help='Base directory for relative icon paths')
    gen.add_argument('-s', '--sample-theme', metavar='PATH', help='Write a sample theme for palette modules')
    gen.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')

    sub.add_parser('modifiers', help='List registered icon modifiers')

    help_parser = sub.add_parser('help', help='Print full docs for a modifier')
    help_parser.add_argument('name', nargs='?', help='Modifier name')

    return parser


def _print_modifiers() -> None:
    print('Available modifiers:\n')
    for name, mod in sorted(registry.all_modifiers().items()):
        print(f'  {name:<16} {_short_doc(name, mod.help)}')
    print('\nRun: stylegen help <modifier> for full docs.')


def _print_help(name: str | None) -> None:
    """Print full module docstring for a modifier."""
    if name is None:
        _print_modifiers()
        return

    modifiers = registry.all_modifiers()
    if name not in modifiers:
        print(f'Unknown modifier: {name}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(modifiers))}', file=sys.stderr)
        sys.exit(1)

    doc = (_load_modifier_module(name).__doc__ or '').strip()
    print(doc if doc else f'(No module docs for {name!r})')


def _generate(args: argparse.Namespace) -> None:
    config = load_config(
        env_file=args.env_file,
        out_dir=args.out_dir,
        icons_root=args.icons_root,
        sample_theme=args.sample_theme,
    )
    if config.env_path:
        print(f'stylegen: loaded {config.env_path}', file=sys.stderr)

    if not os.path.isfile(args.tree):
        print(f'Error: module tree not found: {args.tree}', file=sys.stderr)
        sys.exit(1)

    try:
        module = parse_tree_file(args.tree)
        reports = generate_tree(
            module,
            config.out_dir,
            project_name=config.project,
            resolve_modifier=registry.resolve,
            icons_root=config.icons_root,
            sample_theme_path=config.sample_theme,
        )
    except StyleGenError as e:
        print(f'stylegen: error: {e}', file=sys.stderr)
        sys.exit(1)
    except (ValueError, KeyError, TypeError) as e:
        print(f'stylegen: error: malformed module tree {args.tree}: {e}', file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(format_json(reports))
    else:
        print(format_text(reports))


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == 'help':
        _print_help(getattr(args, 'name', None))
        return

    if args.command == 'modifiers':
        _print_modifiers()
        return

    _generate(args)


if __name__ == '__main__':
    main()
