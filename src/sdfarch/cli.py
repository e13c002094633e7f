"""
Command-line interface for building architectural models.

Usage:
    python -m sdfarch build MODULE:CALLABLE --bbox XMIN YMIN ZMIN XMAX YMAX ZMAX
        [--params FILE.yaml] [--set NAME=VALUE ...] [--workers N]
        [--output FILE.json] [--evaluate] [-v]
    python -m sdfarch show-params [--params FILE.yaml] [--set NAME=VALUE ...]

Examples:
    # Unit sphere, default parameters, summary only
    python -m sdfarch build sdfarch.shapes:unit_sphere --bbox -2 -2 -2 2 2 2 \
        --set resolution=32

    # Sphere class called with no arguments, written to JSON
    python -m sdfarch build sdfarch.shapes:Sphere --factory \
        --bbox -2 -2 -2 2 2 2 --workers 4 --output sphere.json --evaluate
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from typing import Any, Optional, Sequence, Tuple

from .builder import build_architectural_model
from .errors import SdfArchError
from .io.model_json import write_model_json
from .model import BoundingBox
from .params import ExtractionParameters, load_parameters
from .logging_config import setup_logging


def parse_param(param_str: str) -> Tuple[str, Any]:
    """Parse a parameter string like 'name=value' into (name, typed_value)."""
    if '=' not in param_str:
        raise ValueError(f"Invalid parameter format: {param_str} (expected name=value)")

    name, value_str = param_str.split('=', 1)
    name = name.strip()
    value_str = value_str.strip()

    try:
        return (name, int(value_str))
    except ValueError:
        pass

    try:
        return (name, float(value_str))
    except ValueError:
        pass

    if (value_str.startswith('"') and value_str.endswith('"')) or \
       (value_str.startswith("'") and value_str.endswith("'")):
        value_str = value_str[1:-1]

    return (name, value_str)


def resolve_field(target: str, factory: bool = False):
    """Import ``module:attribute`` and return the signed distance field."""
    if ':' not in target:
        raise ValueError(f"Invalid field reference: {target} (expected module:callable)")
    module_name, attr = target.split(':', 1)
    module = importlib.import_module(module_name)
    obj = module
    for part in attr.split('.'):
        obj = getattr(obj, part)
    if factory:
        obj = obj()
    if not callable(obj):
        raise TypeError(f"{target} is not callable")
    return obj


def _load_params(args) -> ExtractionParameters:
    params = load_parameters(args.params) if args.params else ExtractionParameters()
    overrides = dict(parse_param(p) for p in (args.set or []))
    if getattr(args, 'workers', None) is not None:
        overrides['workers'] = args.workers
    if overrides:
        # overrides may use camelCase; later keys win in from_mapping
        params = ExtractionParameters.from_mapping(
            {**params.to_dict(camel_case=False), **overrides})
    return params.validate()


def cmd_show_params(args) -> int:
    try:
        params = _load_params(args)
    except (SdfArchError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(json.dumps(params.to_dict(), indent=2))
    return 0


def cmd_build(args) -> int:
    try:
        params = _load_params(args)
        sdf = resolve_field(args.field, factory=args.factory)
        bbox = BoundingBox.from_bounds(*args.bbox)
    except (SdfArchError, ValueError, TypeError, OSError, ImportError, AttributeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        model = build_architectural_model(sdf, bbox, params)
    except SdfArchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    evaluation = None
    if args.evaluate:
        from .evaluation import evaluate_structure
        evaluation = evaluate_structure(model).to_dict()

    if args.output:
        path = write_model_json(model, args.output,
                                generator={"field": args.field, "parameters": params.to_dict()},
                                evaluation=evaluation)
        print(f"Model written to {path}")

    summary = model.summary()
    if evaluation is not None:
        summary["evaluation"] = evaluation
    print(json.dumps(summary, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='python -m sdfarch',
        description='Extract architectural models from signed distance fields',
    )
    subparsers = parser.add_subparsers(dest='action', required=True)

    def add_param_options(sub):
        sub.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
        sub.add_argument('--log-file', metavar='FILE', help='Also write logs to FILE')
        sub.add_argument('--params', metavar='FILE', help='YAML parameter file')
        sub.add_argument('-s', '--set', action='append', metavar='NAME=VALUE',
                         help='Override one parameter (can be repeated)')

    build = subparsers.add_parser('build', help='Build a model from a field')
    build.add_argument('field', help='Signed distance field as module:callable')
    build.add_argument('--bbox', nargs=6, type=float, required=True,
                       metavar=('XMIN', 'YMIN', 'ZMIN', 'XMAX', 'YMAX', 'ZMAX'),
                       help='Bounding box to extract from')
    build.add_argument('--factory', action='store_true',
                       help='Call the callable with no arguments to obtain the field')
    build.add_argument('-w', '--workers', type=int, help='Sampling threads')
    build.add_argument('-o', '--output', metavar='FILE', help='Write model JSON to FILE')
    build.add_argument('--evaluate', action='store_true',
                       help='Run structural heuristics on the result')
    add_param_options(build)

    show = subparsers.add_parser('show-params', help='Print the effective parameters')
    add_param_options(show)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING
    setup_logging(level, args.log_file)

    if args.action == 'build':
        return cmd_build(args)
    elif args.action == 'show-params':
        return cmd_show_params(args)
    parser.print_help()
    return 1


__all__ = ['main', 'build_parser', 'parse_param', 'resolve_field']
