#!/usr/bin/env python3
"""
Write the demo templates (template3.xlsx, template-all.xlsx).

Usage:
    python build_templates.py [directory]    (default: next to this script)
"""

from pathlib import Path
import sys

from roster_forms.sample_templates import build_all


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    target = Path(argv[0]) if argv else Path(__file__).resolve().parent
    for path in build_all(target):
        print(f"✓ Wrote {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
