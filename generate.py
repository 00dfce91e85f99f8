#!/usr/bin/env python3
"""
Student Form Generator

Reads student records from data2.json, assigns each one a class code
(18 for records 1-20, 19 for 21-40, ...) and writes them into the
spreadsheet templates next to this script.

Usage:
    1. Put data2.json, template-all.xlsx and template3.xlsx next to this file
       (python build_templates.py writes demo templates)
    2. Run: python generate.py                  -> one STT-<n> sheet per record
       or:  python generate.py --classcode 23   -> only the records of class 23
       or:  python generate.py --single         -> fill template3.xlsx with one record
    3. Open the workbook saved under out/
"""

from pathlib import Path
import argparse
import logging
import sys

from roster_forms import (
    RosterFormsError,
    clone_records_to_template,
    fill_data_to_template,
    get_default_config,
    load_config,
    load_records,
    records_to_frame,
    resolve_path,
    select_classcode,
    select_slice,
    validate_config,
)

BASE_DIR = Path(__file__).resolve().parent


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fill spreadsheet templates with student records.")
    parser.add_argument("--config", help="JSON config file (default: config.json next to this script, if present)")
    parser.add_argument("--data", help="JSON array of records (default: data2.json)")
    parser.add_argument("--single", action="store_true", help="fill template3.xlsx with the first selected record")
    parser.add_argument("--start", type=int, help="index of the first record to use")
    parser.add_argument("--end", type=int, help="index after the last record to use")
    parser.add_argument("--classcode", type=int, help="use only the records of this class code")
    parser.add_argument("--output", help="output file name, saved under the out directory")
    parser.add_argument("--preview", action="store_true", help="print the selected records before writing")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def load_settings(config_arg: str | None) -> dict:
    """Load the config file given on the command line, or config.json if it exists."""
    if config_arg:
        return load_config(resolve_path(config_arg, Path.cwd()))
    default_path = BASE_DIR / "config.json"
    if default_path.exists():
        return load_config(default_path)
    return get_default_config()


def single_output_name(record: dict) -> str:
    return f"filled_{record.get('code') or 'record'}_{record.get('name2') or 'record'}.xlsx"


def run(args: argparse.Namespace) -> Path:
    config = load_settings(args.config)
    for issue in validate_config(config):
        if issue["type"] == "error":
            raise RosterFormsError(f"Invalid configuration: {issue['message']}")
        print(f"⚠️  {issue['message']}")

    template_dir = resolve_path(config["template_dir"], BASE_DIR)
    out_dir = resolve_path(config["out_dir"], BASE_DIR)
    data_path = resolve_path(args.data, Path.cwd()) if args.data else resolve_path(config["data_file"], BASE_DIR)

    records = load_records(
        data_path,
        base=config["classcode"]["base"],
        block_size=config["classcode"]["block_size"],
    )
    if not records:
        raise RosterFormsError(f"No records found in {data_path}")
    print(f"✓ Loaded {len(records)} records from {data_path}")

    if args.classcode is not None:
        selected = select_classcode(records, args.classcode)
    else:
        start = args.start if args.start is not None else config["selection"]["start"]
        end = args.end if args.end is not None else config["selection"]["end"]
        selected = select_slice(records, start, end)
    if not selected:
        raise RosterFormsError("The selection does not contain any record")
    print(f"✓ Selected {len(selected)} records")

    if args.preview:
        print(records_to_frame(selected).to_string(index=False))

    if args.single:
        fill = config["fill"]
        first = selected[0]
        return fill_data_to_template(
            first,
            args.output or single_output_name(first),
            template_dir=template_dir,
            out_dir=out_dir,
            template_name=fill["template"],
            sheet_name=fill["sheet"],
            cells=fill["cells"],
        )

    clone = config["clone"]
    output = args.output
    if output is None:
        output = clone["output_file"]
        if args.classcode is not None:
            output = f"{Path(output).stem}_{args.classcode}{Path(output).suffix}"

    result = clone_records_to_template(
        selected,
        output,
        template_dir=template_dir,
        out_dir=out_dir,
        template_name=clone["template"],
        sheet_name=clone["sheet"],
        cells=clone["cells"],
        labels=clone["labels"],
        sheet_prefix=clone["sheet_prefix"],
    )
    print(f"✓ Created {len(result.sheet_names)} sheets ({result.sheet_names[0]} .. {result.sheet_names[-1]})")
    for item in result.skipped_ranges:
        print(f"⚠️  Merge {item.range} skipped on {item.sheet}: {item.reason}")
    return result.path


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("📋 Student Form Generator")
    print("=" * 40)

    try:
        saved = run(args)
    except RosterFormsError as exc:
        print(f"❌ Error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        logging.getLogger(__name__).debug("Unexpected failure", exc_info=True)
        print(f"❌ Error: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1

    print(f"✓ Saved to {saved}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
