"""Command-line interface for pedigree-py.

Usage examples:

pedigree-cli import --file dogs.csv
pedigree-cli add-dog --id d7 --name "Bella" --sire d1 --dam d2
pedigree-cli analyze d3 d4 --generations 6 --format text
pedigree-cli profile d3 d4
pedigree-cli pedigree d7 --generations 4
pedigree-cli serve --port 8000

Exit codes: 0 success, 1 rejected import or write, 2 invalid arguments,
3 coefficient calculation failure.
"""
from __future__ import annotations
from pathlib import Path
import argparse
import json
import logging
import sys

from .analysis import analyze, coefficient_profile
from .config import load_config
from .errors import InvalidArgument, ComputationError
from .fs import json_save
from .importer import import_csv
from .models import Dog
from .pedigree import pedigree_chart
from .storage import Storage
from .templating import render_template


def _print_json(obj) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2))


def cmd_import(storage: Storage, args, cfg) -> int:
    path = Path(args.file)
    if not path.exists():
        print(f"CSV file not found: {path}")
        return 2
    n, errors, warnings = import_csv(path, storage)
    for w in warnings:
        print(f"warning: {w}")
    if errors:
        for e in errors:
            print(f"error: {e}")
        return 1
    print(f"Imported {n} dogs")
    return 0


def cmd_add_dog(storage: Storage, args, cfg) -> int:
    d = Dog.from_dict({
        "id": args.id,
        "name": args.name,
        "registration_number": args.registration,
        "sex": args.sex,
        "breed": args.breed,
        "sire_id": args.sire,
        "dam_id": args.dam,
    })
    try:
        storage.add_dog(d)
    except ValueError as exc:
        print(f"error: {exc}")
        return 1
    print(f"Dog added with ID: {d.id}")
    return 0


def cmd_analyze(storage: Storage, args, cfg) -> int:
    generations = cfg.default_generations if args.generations is None else args.generations
    result = analyze(storage, args.sire, args.dam, generations, cfg.density_threshold)
    data = result.to_dict()
    if args.output:
        json_save(Path(args.output), data)
        print(f"Analysis written to {args.output}")
    if args.format == "text":
        sire = storage.get_dog(args.sire)
        dam = storage.get_dog(args.dam)
        print(render_template("report.txt", {
            "result": data,
            "sire_label": sire.name or sire.id,
            "dam_label": dam.name or dam.id,
        }))
    elif not args.output:
        _print_json(data)
    return 0


def cmd_profile(storage: Storage, args, cfg) -> int:
    generations = cfg.default_generations if args.generations is None else args.generations
    for g, f in coefficient_profile(storage, args.sire, args.dam, generations):
        print(f"{g:>2}  {f * 100:6.2f}%")
    return 0


def cmd_pedigree(storage: Storage, args, cfg) -> int:
    entries = pedigree_chart(storage, args.dog, args.generations)
    if not entries:
        print(f"Dog {args.dog} not found.")
        return 2
    for e in entries:
        indent = "  " * e["generation"]
        label = e["name"] or e["dog_id"]
        flags = "" if e["recorded"] else " (not on record)"
        if e["repeated"]:
            flags += " *"
        print(f"{indent}{e['position']}. {label}{flags}")
    return 0


def cmd_serve(storage: Storage, args, cfg) -> int:
    import uvicorn

    storage.close()
    uvicorn.run("pedigree_py.web.app:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pedigree-cli", description="Pedigree genetic analysis")
    p.add_argument("--config", help="JSON config file")
    p.add_argument("--data-dir", help="Data dir (where storage.db lives or will be created)")
    p.add_argument("--verbose", "-v", action="store_true")
    sub = p.add_subparsers(dest="cmd", required=True)

    imp = sub.add_parser("import", help="Import dogs from a pedigree CSV")
    imp.add_argument("--file", "-f", required=True)
    imp.set_defaults(func=cmd_import)

    add = sub.add_parser("add-dog", help="Record a dog")
    add.add_argument("--id")
    add.add_argument("--name", required=True)
    add.add_argument("--registration")
    add.add_argument("--sex", choices=["M", "F"])
    add.add_argument("--breed")
    add.add_argument("--sire")
    add.add_argument("--dam")
    add.set_defaults(func=cmd_add_dog)

    ana = sub.add_parser("analyze", help="Analyse a sire x dam mating")
    ana.add_argument("sire")
    ana.add_argument("dam")
    ana.add_argument("--generations", "-g", type=int)
    ana.add_argument("--format", choices=["json", "text"], default="json")
    ana.add_argument("--output", "-o", help="Also write the JSON result to this file")
    ana.set_defaults(func=cmd_analyze)

    prof = sub.add_parser("profile", help="Coefficient for every generation bound")
    prof.add_argument("sire")
    prof.add_argument("dam")
    prof.add_argument("--generations", "-g", type=int)
    prof.set_defaults(func=cmd_profile)

    ped = sub.add_parser("pedigree", help="Print a dog's pedigree chart")
    ped.add_argument("dog")
    ped.add_argument("--generations", "-g", type=int, default=3)
    ped.set_defaults(func=cmd_pedigree)

    srv = sub.add_parser("serve", help="Run the web API")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.set_defaults(func=cmd_serve)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    cfg = load_config(args.config)
    if args.data_dir:
        cfg.data_dir = Path(args.data_dir)

    storage = Storage(cfg.data_dir)
    try:
        return args.func(storage, args, cfg)
    except InvalidArgument as exc:
        print(f"invalid argument: {exc}")
        return 2
    except ComputationError as exc:
        print(f"coefficient calculation failed: {exc}")
        return 3
    finally:
        storage.close()


if __name__ == "__main__":
    sys.exit(main())
