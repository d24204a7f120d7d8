from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from tlpcore.models import Feature, ImportParams, Project
from tlpcore.tlp_export import generate
from tlpcore.tlp_import import parse
from tlpcore.tlp_selector import TlpDecodeError
from tlpcore.validation import NoteValidationError


# exit codes (keep stable)
EXIT_OK = 0
EXIT_DECODE_FAILED = 2
EXIT_BAD_ARGS = 5


def _print_err(msg: str) -> None:
    print(msg, file=sys.stderr)


def _resolve_out(src: Path, suffix: str, *, out_dir: str | Path | None, out_path: str | Path | None) -> Path:
    if out_path is not None:
        p = Path(out_path)
        if p.exists() and p.is_dir():
            p = p / f"{src.stem}{suffix}"
        if p.suffix.lower() != suffix:
            p = p.with_suffix(suffix)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p.resolve()

    out_base = Path(out_dir) if out_dir is not None else src.parent
    out_base.mkdir(parents=True, exist_ok=True)
    return (out_base / f"{src.stem}{suffix}").resolve()


def tlp_to_json(
    tlp_path: str | Path,
    *,
    out_dir: str | Path | None = None,
    out_path: str | Path | None = None,
    default_lyric: str | None = None,
    skip_corrupt: bool | None = None,
) -> tuple[Path, Project]:
    tlp_path = Path(tlp_path)
    params = ImportParams(default_lyric=default_lyric) if default_lyric else ImportParams()
    project = parse(tlp_path, params, skip_corrupt=skip_corrupt)

    p = _resolve_out(tlp_path, ".json", out_dir=out_dir, out_path=out_path)
    p.write_text(project.model_dump_json(indent=2), encoding="utf-8")
    return p, project


def json_to_tlp(
    json_path: str | Path,
    *,
    out_dir: str | Path | None = None,
    out_path: str | Path | None = None,
    features: list[Feature] | None = None,
):
    json_path = Path(json_path)
    if not json_path.exists() or not json_path.is_file():
        raise FileNotFoundError(f"json_path not found: {json_path}")

    project = Project.model_validate_json(json_path.read_text(encoding="utf-8"))
    result = generate(project, features or [])

    p = _resolve_out(json_path, ".tlp", out_dir=out_dir, out_path=out_path)
    p.write_bytes(result.content)
    return p, result


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tlpkit.convert", description="TLP conversion tools (local)")
    sub = p.add_subparsers(dest="cmd", required=True)

    t = sub.add_parser("tlp2json", help="Convert a TuneLab .tlp file to canonical project JSON")
    t.add_argument("tlp", type=str, help="Path to .tlp")
    t.add_argument("--out-dir", default=None, help="Output directory (default: same as tlp)")
    t.add_argument("--out", default=None, help="Explicit output file path (.json)")
    t.add_argument("--default-lyric", default=None, help="Lyric used for notes with a blank lyric")
    t.add_argument(
        "--skip-corrupt",
        action="store_true",
        default=None,
        help="Skip snapshots that fail to parse instead of failing",
    )

    j = sub.add_parser("json2tlp", help="Convert canonical project JSON back to .tlp")
    j.add_argument("json", type=str, help="Path to project.json")
    j.add_argument("--out-dir", default=None, help="Output directory (default: same as json)")
    j.add_argument("--out", default=None, help="Explicit output file path (.tlp)")
    j.add_argument("--pitch", action="store_true", help="Request pitch conversion")

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.cmd == "tlp2json":
            out, project = tlp_to_json(
                args.tlp,
                out_dir=args.out_dir,
                out_path=args.out,
                default_lyric=args.default_lyric,
                skip_corrupt=args.skip_corrupt,
            )
            for w in project.import_warnings:
                _print_err(f"warning: {w.value}")
            print(str(out))
            return EXIT_OK

        if args.cmd == "json2tlp":
            features = [Feature.convert_pitch] if args.pitch else []
            out, result = json_to_tlp(args.json, out_dir=args.out_dir, out_path=args.out, features=features)
            for n in result.notifications:
                _print_err(f"notice: {n.value}")
            print(str(out))
            return EXIT_OK

    except FileNotFoundError as e:
        _print_err(str(e))
        return EXIT_BAD_ARGS
    except (TlpDecodeError, NoteValidationError, ValidationError) as e:
        _print_err(f"conversion failed: {e}")
        return EXIT_DECODE_FAILED

    raise SystemExit(f"Unknown command: {args.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
